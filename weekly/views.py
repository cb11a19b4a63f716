# views.py
import json
import logging
from functools import wraps

from django.http import HttpResponse, JsonResponse
from django.utils import timezone
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST

from .exceptions import PersistenceError, WorkflowError
from .forms import BallotForm, NominationForm, SetGenreForm
from .services import results as results_service
from .services.excel_export import export_history_to_excel
from .services.tmdb import CatalogError, CatalogNotConfigured, TMDBClient
from .services.weeks import get_week_or_raise, parse_week_date
from .services.workflow import WeekPhaseController


logger = logging.getLogger(__name__)


class BadPayload(Exception):
    pass


def _payload(request) -> dict:
    if request.content_type == "application/json":
        try:
            data = json.loads(request.body.decode("utf-8") or "{}")
        except (UnicodeDecodeError, ValueError) as exc:
            raise BadPayload("JSON invàlid") from exc
        if not isinstance(data, dict):
            raise BadPayload("El cos ha de ser un objecte JSON.")
        return data
    return request.POST.dict()


def _form_error(form):
    return JsonResponse(
        {"ok": False, "error": "invalid_form", "errors": form.errors.get_json_data()},
        status=400,
    )


def workflow_action(view):
    """
    - valida i normalitza `week_date` de la URL (400 si no és YYYY-MM-DD)
    - tradueix errors de negoci i d'emmagatzematge a JSON
    """
    @wraps(view)
    def _wrapped(request, *args, **kwargs):
        if "week_date" in kwargs:
            try:
                kwargs["week_date"] = parse_week_date(kwargs["week_date"])
            except ValueError:
                return JsonResponse(
                    {"ok": False, "error": "invalid_date", "message": "The date must be in YYYY-MM-DD format."},
                    status=400,
                )
        try:
            return view(request, *args, **kwargs)
        except BadPayload as exc:
            return JsonResponse({"ok": False, "error": "invalid_payload", "message": str(exc)}, status=400)
        except WorkflowError as exc:
            logger.info("Rejected %s %s: %s (%s)", request.method, request.path, exc.code, exc)
            return JsonResponse(exc.as_dict(), status=exc.status)
        except PersistenceError as exc:
            return JsonResponse(exc.as_dict(), status=exc.status)
    return _wrapped


def _controller():
    return WeekPhaseController()


# ---------------------------------------------------------------------------
# CONSULTES
# ---------------------------------------------------------------------------

@require_GET
@workflow_action
def calendar_view(request):
    return JsonResponse({"ok": True, "weeks": results_service.week_calendar()})


@require_GET
@workflow_action
def week_detail_view(request, week_date):
    return JsonResponse({"ok": True, **results_service.week_detail(week_date)})


@require_GET
@workflow_action
def results_view(request, week_date):
    week = get_week_or_raise(week_date)
    return JsonResponse({"ok": True, **results_service.results_payload(week)})


@require_GET
@workflow_action
def export_history_view(request):
    content = export_history_to_excel()
    filename = f"film-club-data-{timezone.localdate().isoformat()}.xlsx"
    resp = HttpResponse(
        content,
        content_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )
    resp["Content-Disposition"] = f'attachment; filename="{filename}"'
    return resp


# ---------------------------------------------------------------------------
# ACCIONS
# ---------------------------------------------------------------------------

@csrf_exempt
@require_POST
@workflow_action
def set_genre_view(request, week_date):
    form = SetGenreForm(_payload(request))
    if not form.is_valid():
        return _form_error(form)

    cd = form.cleaned_data
    week = _controller().set_genre(
        week_date,
        genre_id=cd.get("genre"),
        custom_genre=cd.get("custom_genre") or None,
        random_pick=bool(cd.get("random")),
        acting_member=cd.get("member") or None,
    )
    return JsonResponse({
        "ok": True,
        "week": week.week_date.isoformat(),
        "phase": week.phase,
        "genre": week.genre,
        "genre_source": week.genre_source,
    })


@csrf_exempt
@require_POST
@workflow_action
def propose_nomination_view(request, week_date):
    form = NominationForm(_payload(request))
    if not form.is_valid():
        return _form_error(form)

    nomination = _controller().propose_nomination(week_date, form.cleaned_data["member"], form.film())
    return JsonResponse({
        "ok": True,
        "id": nomination.id,
        "week": week_date.isoformat(),
        "film_title": nomination.film_title,
        "film_year": nomination.film_year,
    }, status=201)


@csrf_exempt
@require_POST
@workflow_action
def remove_nomination_view(request, nomination_id):
    data = _payload(request)
    _controller().nominations.remove(nomination_id, member=data.get("member") or None)
    return JsonResponse({"ok": True, "id": nomination_id})


@csrf_exempt
@require_POST
@workflow_action
def open_voting_view(request, week_date):
    week = _controller().open_voting(week_date)
    return JsonResponse({"ok": True, "week": week.week_date.isoformat(), "phase": week.phase})


@csrf_exempt
@require_POST
@workflow_action
def submit_ballot_view(request, week_date):
    form = BallotForm(_payload(request))
    if not form.is_valid():
        return _form_error(form)

    ballot = _controller().submit_ballot(week_date, form.cleaned_data["member"], form.ranking_payload())
    return JsonResponse({"ok": True, "id": ballot.id, "week": week_date.isoformat()}, status=201)


@csrf_exempt
@require_POST
@workflow_action
def calculate_results_view(request, week_date):
    week, _ = _controller().calculate_results(week_date)
    return JsonResponse({"ok": True, **results_service.results_payload(week)})


# ---------------------------------------------------------------------------
# CATÀLEG EXTERN (TMDB)
# ---------------------------------------------------------------------------

@require_GET
def search_films_view(request):
    query = (request.GET.get("query") or "").strip()
    if not query:
        return JsonResponse({"ok": False, "error": "Query parameter required"}, status=400)
    try:
        films = TMDBClient().search_films(query)
    except CatalogNotConfigured as exc:
        return JsonResponse({"ok": False, "error": str(exc)}, status=503)
    except CatalogError as exc:
        return JsonResponse({"ok": False, "error": "Failed to search films", "details": str(exc)}, status=502)
    return JsonResponse({"ok": True, "results": films})


@require_GET
def film_details_view(request, tmdb_id):
    try:
        film = TMDBClient().film_details(tmdb_id)
    except CatalogNotConfigured as exc:
        return JsonResponse({"ok": False, "error": str(exc)}, status=503)
    except CatalogError as exc:
        return JsonResponse({"ok": False, "error": "Failed to get film details", "details": str(exc)}, status=502)
    return JsonResponse({"ok": True, "film": film})
