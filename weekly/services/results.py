# services/results.py
from __future__ import annotations

from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from django.conf import settings
from django.db.models import Count
from django.utils import timezone

from ..exceptions import storage_errors
from ..models import Nomination, Week
from ..phases import Phase, require_phase
from . import weeks
from .ballots import BallotStore
from .nominations import NominationRegistry
from .tmdb import poster_url
from .workflow import min_nominations


def _nomination_dict(n: Nomination) -> Dict[str, Any]:
    return {
        "id": n.id,
        "film_title": n.film_title,
        "film_year": n.film_year,
        "tmdb_id": n.tmdb_id,
        "poster_path": n.poster_path,
        "poster_url": poster_url(n.poster_path),
        "director": n.director,
        "runtime": n.runtime,
        "nominated_by": n.member.name,
        "nominated_at": n.nominated_at.isoformat() if n.nominated_at else None,
    }


def results_payload(week: Week) -> Dict[str, Any]:
    """
    Resultat per a la capa de presentació. Llegeix la foto desada en tancar
    la setmana; no recalcula res.
    """
    require_phase(week.phase, Phase.COMPLETE, action="view results")
    winner = week.winning_nomination
    snapshot = week.results or {}

    return {
        "week": week.week_date.isoformat(),
        "genre": week.genre,
        "winner": {
            "nomination_id": winner.id,
            "film_title": winner.film_title,
            "film_year": winner.film_year,
            "poster_url": poster_url(winner.poster_path),
            "nominated_by": winner.member.name,
            "score": week.winning_score,
        } if winner else None,
        "tied": snapshot.get("tied", []),
        "ballot_count": snapshot.get("ballot_count", 0),
        "breakdown": snapshot.get("breakdown", []),
    }


def week_detail(week_date) -> Dict[str, Any]:
    d = weeks.parse_week_date(week_date)
    with storage_errors("week detail"):
        week = Week.objects.filter(week_date=d).select_related("genre_set_by").first()
        phase = weeks.phase_of(week)
        nominations: List[Nomination] = []
        voters: List[str] = []
        if week is not None:
            nominations = NominationRegistry().list_for(d)
            voters = BallotStore().voters_for(d)

    quorum = min_nominations()
    return {
        "week": d.isoformat(),
        "phase": phase.value,
        "genre": week.genre if week else "",
        "genre_source": week.genre_source if week else "",
        "genre_set_by": week.genre_set_by.name if week and week.genre_set_by else None,
        "nominations": [_nomination_dict(n) for n in nominations],
        "nomination_count": len(nominations),
        "quorum": quorum,
        "can_open_voting": phase == Phase.NOMINATION and len(nominations) >= quorum,
        "voters": voters,
        "winning_nomination_id": week.winning_nomination_id if week else None,
        "winning_score": week.winning_score if week else None,
    }


def week_calendar(today: Optional[date] = None) -> List[Dict[str, Any]]:
    """
    Setmanes des de FILMCLUB_WEEKS_PAST enrere fins a FILMCLUB_WEEKS_FUTURE
    endavant. Les setmanes sense registre surten en 'planning'.
    """
    today = today or timezone.localdate()
    current = weeks.week_start(today)
    past = int(getattr(settings, "FILMCLUB_WEEKS_PAST", 4))
    future = int(getattr(settings, "FILMCLUB_WEEKS_FUTURE", 12))
    dates = [current + timedelta(weeks=i) for i in range(-past, future + 1)]

    with storage_errors("week calendar"):
        qs = (
            Week.objects
            .filter(week_date__gte=dates[0], week_date__lte=dates[-1])
            .select_related("winning_nomination")
            .prefetch_related("ballots__member")
            .annotate(
                nomination_count=Count("nominations", distinct=True),
                ballot_count=Count("ballots", distinct=True),
            )
        )
        by_date = {w.week_date: w for w in qs}

    out = []
    for d in dates:
        w = by_date.get(d)
        winner = w.winning_nomination if w else None
        out.append({
            "week": d.isoformat(),
            "is_current": d == current,
            "phase": weeks.phase_of(w).value,
            "genre": w.genre if w else "",
            "nomination_count": w.nomination_count if w else 0,
            "ballot_count": w.ballot_count if w else 0,
            "voters": [b.member.name for b in w.ballots.all()] if w else [],
            "winner": {
                "film_title": winner.film_title,
                "film_year": winner.film_year,
                "score": w.winning_score,
            } if winner else None,
        })
    return out
