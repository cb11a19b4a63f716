# services/nominations.py
import logging

from django.db import IntegrityError, transaction

from ..exceptions import DuplicateNomination, InvalidFilm, NotFound, storage_errors
from ..models import Nomination
from ..phases import Phase, require_phase
from ..scoring_engine import to_int
from . import weeks
from .members import resolve_member


logger = logging.getLogger(__name__)

FILM_FIELDS = (
    "film_title",
    "film_year",
    "tmdb_id",
    "poster_path",
    "director",
    "runtime",
    "overview",
    "vote_average",
)


# límits de les columnes enteres de Nomination
INT_BOUNDS = {
    "film_year": (1, 32767),
    "tmdb_id": (1, 2147483647),
    "runtime": (1, 32767),
}


def _film_kwargs(film: dict) -> dict:
    """
    Normalitza la fitxa de la pel·lícula abans de tocar la base de dades.
    Qualsevol valor no vàlid llença InvalidFilm.
    """
    if not isinstance(film, dict):
        raise InvalidFilm("Film data must be an object.")

    data = {k: film.get(k) for k in FILM_FIELDS if film.get(k) not in (None, "")}
    title = str(data.get("film_title") or "").strip()
    if not title:
        raise InvalidFilm("Film title is required.")
    if len(title) > 255:
        raise InvalidFilm("Film title is too long (max 255 characters).")
    data["film_title"] = title

    for key, (low, high) in INT_BOUNDS.items():
        if key not in data:
            continue
        try:
            value = to_int(data[key])
        except ValueError:
            raise InvalidFilm(f"{key} must be an integer.")
        if not low <= value <= high:
            raise InvalidFilm(f"{key} must be between {low} and {high}.")
        data[key] = value

    if "vote_average" in data:
        raw = data["vote_average"]
        try:
            if isinstance(raw, bool):
                raise ValueError(raw)
            value = float(raw)
        except (TypeError, ValueError):
            raise InvalidFilm("vote_average must be a number.")
        if not 0 <= value <= 10:
            raise InvalidFilm("vote_average must be between 0 and 10.")
        data["vote_average"] = value

    return data


class NominationRegistry:
    """
    Propostes de pel·lícula per setmana. Un membre, una nominació per setmana:
    la unicitat la garanteix la restricció de base de dades, no una lectura prèvia.
    """

    def propose(self, week_date, member, film: dict) -> Nomination:
        member = resolve_member(member)
        film_data = _film_kwargs(film)

        with storage_errors("propose nomination"), transaction.atomic():
            week = weeks.lock_week(week_date)
            require_phase(weeks.phase_of(week), Phase.NOMINATION, action="propose nomination")

            try:
                with transaction.atomic():
                    nomination = Nomination.objects.create(week=week, member=member, **film_data)
            except IntegrityError:
                if Nomination.objects.filter(week=week, member=member).exists():
                    logger.warning("Duplicate nomination rejected week=%s member=%s", week.week_date, member.name)
                    raise DuplicateNomination()
                raise

        logger.info(
            "Nomination %s created week=%s member=%s film=%r",
            nomination.id, week.week_date, member.name, nomination.film_title,
        )
        return nomination

    def count_for(self, week_date) -> int:
        with storage_errors("count nominations"):
            return Nomination.objects.filter(week__week_date=weeks.parse_week_date(week_date)).count()

    def list_for(self, week_date):
        with storage_errors("list nominations"):
            return list(
                Nomination.objects
                .filter(week__week_date=weeks.parse_week_date(week_date))
                .select_related("member")
                .order_by("nominated_at", "id")
            )

    def remove(self, nomination_id, member=None) -> None:
        """
        Retirada d'una nominació, només abans d'obrir la votació.
        Si es passa `member`, ha de ser qui la va proposar.
        """
        acting = resolve_member(member) if member is not None else None

        with storage_errors("remove nomination"), transaction.atomic():
            nomination = Nomination.objects.filter(pk=nomination_id).select_related("member", "week").first()
            if nomination is None:
                raise NotFound(f"Nomination {nomination_id} not found.")
            if acting is not None and nomination.member_id != acting.id:
                raise NotFound(f"Nomination {nomination_id} was not proposed by {acting.name}.")

            # bloqueja la setmana perquè no s'obri la votació mentrestant
            week = weeks.lock_week(nomination.week.week_date)
            require_phase(week.phase, Phase.PLANNING, Phase.NOMINATION, action="remove nomination")
            nomination.delete()

        logger.info("Nomination %s removed week=%s", nomination_id, week.week_date)
