import io
import json
from unittest import mock

import httpx
import openpyxl
import pytest
from django.db import DatabaseError

from weekly.models import Week
from weekly.services.tmdb import TMDBClient


pytestmark = pytest.mark.django_db

URL = "/weeks/2024-03-04/"


def post(client, url, payload=None):
    return client.post(url, data=json.dumps(payload or {}), content_type="application/json")


@pytest.fixture
def voting(client, members):
    assert post(client, URL + "genre/", {"custom_genre": "Noir", "member": "Ana"}).status_code == 200
    ids = []
    for member, title in (("Ana", "A"), ("Biel", "B"), ("Carla", "C")):
        resp = post(client, URL + "nominations/", {"member": member, "film_title": title, "film_year": 1950})
        assert resp.status_code == 201
        ids.append(resp.json()["id"])
    assert post(client, URL + "open-voting/").status_code == 200
    return ids


def test_full_week_flow(client, voting):
    a, b, c = voting
    assert post(client, URL + "ballots/", {"member": "Ana", "order": [b, a, c]}).status_code == 201
    assert post(client, URL + "ballots/", {"member": "Biel", "ranking": {str(a): 1, str(b): 3, str(c): 2}}).status_code == 201

    resp = post(client, URL + "calculate-results/")
    assert resp.status_code == 200
    body = resp.json()
    assert body["ok"] is True
    assert body["winner"]["nomination_id"] == b
    assert body["winner"]["score"] == 6
    assert body["ballot_count"] == 2
    assert [row["nomination_id"] for row in body["breakdown"]] == [b, a, c]

    resp = client.get(URL + "results/")
    assert resp.status_code == 200
    assert resp.json()["winner"]["film_title"] == "B"


def test_week_detail(client, voting):
    body = client.get("/weeks/2024-03-07/").json()
    assert body["week"] == "2024-03-04"
    assert body["phase"] == "voting"
    assert body["genre_set_by"] == "Ana"
    assert body["nomination_count"] == 3
    assert body["can_open_voting"] is False
    assert [n["nominated_by"] for n in body["nominations"]] == ["Ana", "Biel", "Carla"]


def test_set_genre_accepts_form_encoded_body(client, db):
    resp = client.post(URL + "genre/", {"custom_genre": "Noir"})
    assert resp.status_code == 200
    assert resp.json()["phase"] == "nomination"


def test_set_genre_requires_one_choice(client, db):
    resp = post(client, URL + "genre/", {})
    assert resp.status_code == 400
    assert resp.json()["error"] == "invalid_form"


def test_duplicate_nomination_and_quorum(client, members):
    post(client, URL + "genre/", {"custom_genre": "Noir"})
    post(client, URL + "nominations/", {"member": "Ana", "film_title": "A"})

    resp = post(client, URL + "nominations/", {"member": "Ana", "film_title": "Z"})
    assert resp.status_code == 409
    assert resp.json()["error"] == "duplicate_nomination"

    resp = post(client, URL + "open-voting/")
    assert resp.status_code == 409
    assert resp.json()["error"] == "quorum_not_met"


def test_remove_nomination(client, members):
    post(client, URL + "genre/", {"custom_genre": "Noir"})
    nomination_id = post(client, URL + "nominations/", {"member": "Ana", "film_title": "A"}).json()["id"]

    resp = post(client, f"/nominations/{nomination_id}/delete/", {"member": "Biel"})
    assert resp.status_code == 404

    resp = post(client, f"/nominations/{nomination_id}/delete/", {"member": "Ana"})
    assert resp.status_code == 200
    assert client.get(URL).json()["nomination_count"] == 0


def test_ballot_errors(client, voting):
    a, b, c = voting
    post(client, URL + "ballots/", {"member": "Ana", "order": [a, b, c]})

    resp = post(client, URL + "ballots/", {"member": "Ana", "order": [c, b, a]})
    assert (resp.status_code, resp.json()["error"]) == (409, "duplicate_ballot")

    resp = post(client, URL + "ballots/", {"member": "Biel", "order": [a, a, b]})
    assert (resp.status_code, resp.json()["error"]) == (400, "invalid_ranking")

    resp = post(client, URL + "ballots/", {"member": "Biel", "ranking": {str(a): 1, "999": 2, str(c): 3}})
    assert (resp.status_code, resp.json()["error"]) == (400, "invalid_ranking")

    resp = post(client, URL + "ballots/", {"member": "Biel"})
    assert (resp.status_code, resp.json()["error"]) == (400, "invalid_form")

    resp = post(client, URL + "ballots/", {"member": "Nobody", "order": [a, b, c]})
    assert (resp.status_code, resp.json()["error"]) == (404, "not_found")


def test_results_before_complete(client, voting):
    resp = client.get(URL + "results/")
    assert resp.status_code == 409
    assert resp.json()["error"] == "phase_mismatch"


def test_results_for_unknown_week(client, db):
    resp = client.get("/weeks/2030-01-07/results/")
    assert resp.status_code == 404


def test_invalid_date(client, db):
    resp = client.get("/weeks/2024-13-45/")
    assert resp.status_code == 400
    assert resp.json()["error"] == "invalid_date"

    resp = post(client, "/weeks/next-monday/genre/", {"custom_genre": "Noir"})
    assert resp.status_code == 400


def test_invalid_json_body(client, db):
    resp = client.post(URL + "genre/", data="{not json", content_type="application/json")
    assert resp.status_code == 400
    assert resp.json()["error"] == "invalid_payload"


def test_actions_require_post(client, db):
    assert client.get(URL + "open-voting/").status_code == 405


def test_storage_failure_is_reported(client, voting):
    with mock.patch.object(Week, "save", side_effect=DatabaseError("database is locked")):
        resp = post(client, URL + "calculate-results/")
    assert resp.status_code == 500
    assert resp.json()["error"] == "persistence_error"
    assert client.get(URL).json()["phase"] == "voting"


def test_calendar(client, voting):
    with mock.patch("django.utils.timezone.localdate", return_value=Week.objects.get().week_date):
        weeks = client.get("/").json()["weeks"]
    assert len(weeks) == 17
    current = [w for w in weeks if w["is_current"]]
    assert current[0]["week"] == "2024-03-04"
    assert current[0]["phase"] == "voting"
    assert current[0]["nomination_count"] == 3
    assert weeks[0]["phase"] == "planning"


def test_export_history(client, voting):
    a, b, c = voting
    post(client, URL + "ballots/", {"member": "Dani", "order": [c, a, b]})
    post(client, URL + "calculate-results/")

    resp = client.get("/weeks/export/")
    assert resp.status_code == 200
    assert resp["Content-Disposition"].startswith('attachment; filename="film-club-data-')

    ws = openpyxl.load_workbook(io.BytesIO(resp.content))["Weeks"]
    header = [cell.value for cell in ws[1]]
    row = dict(zip(header, [cell.value for cell in ws[2]]))
    assert row["Genre"] == "Noir"
    assert row["Winner"] == "C"
    assert row["Nominated by"] == "Carla"
    assert row["Score"] == 3
    assert ws.max_row == 2


def test_health(client, db):
    resp = client.get("/health/")
    assert resp.status_code == 200
    assert resp.json() == {"ok": True, "database": "ok", "catalog_configured": False}


class TestFilmSearch:
    def test_query_required(self, client):
        assert client.get("/api/search-films").status_code == 400

    def test_catalog_not_configured(self, client):
        resp = client.get("/api/search-films", {"query": "noir"})
        assert resp.status_code == 503

    def test_search_through_proxy(self, client, monkeypatch):
        def handler(request):
            return httpx.Response(200, json={"results": [
                {"id": 996, "title": "Double Indemnity", "release_date": "1944-09-06", "poster_path": "/p.jpg"},
            ]})

        monkeypatch.setattr(
            "weekly.views.TMDBClient",
            lambda: TMDBClient(api_key="k", transport=httpx.MockTransport(handler)),
        )
        resp = client.get("/api/search-films", {"query": "double"})
        assert resp.status_code == 200
        assert resp.json()["results"][0]["film_year"] == 1944

    def test_upstream_failure(self, client, monkeypatch):
        monkeypatch.setattr(
            "weekly.views.TMDBClient",
            lambda: TMDBClient(api_key="k", transport=httpx.MockTransport(lambda r: httpx.Response(500))),
        )
        assert client.get("/api/film/996").status_code == 502


def test_typed_errors_for_bad_nomination_input(client, members):
    post(client, URL + "genre/", {"custom_genre": "Noir"})

    resp = post(client, URL + "nominations/", {"member": "²", "film_title": "A"})
    assert (resp.status_code, resp.json()["error"]) == (404, "not_found")

    resp = post(client, URL + "nominations/", {"member": "Ana", "film_title": "A", "film_year": "abc"})
    assert (resp.status_code, resp.json()["error"]) == (400, "invalid_form")


def test_export_storage_failure_is_reported(client, db):
    with mock.patch.object(Week.objects, "select_related", side_effect=DatabaseError("no such table")):
        resp = client.get("/weeks/export/")
    assert resp.status_code == 500
    assert resp.json()["error"] == "persistence_error"
