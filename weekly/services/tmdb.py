# services/tmdb.py
import logging
from typing import Any, Dict, List, Optional

import httpx
from django.conf import settings


logger = logging.getLogger(__name__)


class CatalogError(Exception):
    pass


class CatalogNotConfigured(CatalogError):
    pass


def _year(release_date: Optional[str]) -> Optional[int]:
    if release_date and len(release_date) >= 4 and release_date[:4].isdigit():
        return int(release_date[:4])
    return None


class TMDBClient:
    """
    Proxy mínim cap a TMDB: cerca i fitxa de pel·lícula.
    La clau d'API no surt mai cap al navegador.
    """

    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None,
                 timeout: Optional[float] = None, transport: Optional[httpx.BaseTransport] = None):
        self.api_key = api_key if api_key is not None else getattr(settings, "TMDB_API_KEY", "")
        self.base_url = (base_url or getattr(settings, "TMDB_BASE_URL", "https://api.themoviedb.org/3")).rstrip("/")
        self.timeout = timeout or float(getattr(settings, "TMDB_TIMEOUT", 10))
        self.transport = transport

    def _get(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        if not self.api_key:
            raise CatalogNotConfigured("TMDB_API_KEY is not configured.")

        query = {"api_key": self.api_key, "language": "en-US", **params}
        try:
            with httpx.Client(base_url=self.base_url, timeout=self.timeout, transport=self.transport) as client:
                resp = client.get(path, params=query)
                resp.raise_for_status()
                return resp.json()
        except httpx.HTTPStatusError as exc:
            logger.warning("TMDB %s returned %s", path, exc.response.status_code)
            raise CatalogError(f"Film catalog error ({exc.response.status_code}).") from exc
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("TMDB %s failed: %s", path, exc)
            raise CatalogError(f"Film catalog unavailable: {exc}") from exc

    def search_films(self, query: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        limit = limit or int(getattr(settings, "FILMCLUB_MAX_SEARCH_RESULTS", 5))
        data = self._get("/search/movie", {"query": query})
        out = []
        for item in (data.get("results") or [])[:limit]:
            out.append({
                "tmdb_id": item.get("id"),
                "film_title": item.get("title") or "",
                "film_year": _year(item.get("release_date")),
                "poster_path": item.get("poster_path") or "",
                "overview": item.get("overview") or "",
                "vote_average": item.get("vote_average"),
            })
        return out

    def film_details(self, tmdb_id: int) -> Dict[str, Any]:
        data = self._get(f"/movie/{int(tmdb_id)}", {"append_to_response": "credits"})
        crew = (data.get("credits") or {}).get("crew") or []
        directors = [c.get("name") for c in crew if c.get("job") == "Director" and c.get("name")]
        return {
            "tmdb_id": data.get("id"),
            "film_title": data.get("title") or "",
            "film_year": _year(data.get("release_date")),
            "poster_path": data.get("poster_path") or "",
            "director": ", ".join(directors),
            "runtime": data.get("runtime"),
            "overview": data.get("overview") or "",
            "vote_average": data.get("vote_average"),
        }


def poster_url(poster_path: str, size: Optional[str] = None) -> str:
    if not poster_path:
        return ""
    base = getattr(settings, "TMDB_IMAGE_BASE", "https://image.tmdb.org/t/p").rstrip("/")
    size = size or getattr(settings, "TMDB_POSTER_SIZE", "w92")
    return f"{base}/{size}{poster_path}"
