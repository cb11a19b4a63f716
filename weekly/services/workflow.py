# services/workflow.py
from __future__ import annotations

import logging
import random
from typing import Optional, Tuple

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from ..exceptions import InvalidGenre, NotFound, QuorumNotMet, storage_errors
from ..models import Genre, Week
from ..phases import Phase, advance, require_phase
from ..scoring_engine import Candidate, EngineResult, ScoringEngine
from . import weeks
from .ballots import BallotStore, ballot_inputs
from .members import resolve_member
from .nominations import NominationRegistry


logger = logging.getLogger(__name__)


def min_nominations() -> int:
    return int(getattr(settings, "FILMCLUB_MIN_NOMINATIONS", 3))


class WeekPhaseController:
    """
    Màquina d'estats de cada setmana:

        planning -> nomination -> voting -> complete

    Cada transició valida la precondició i muta la setmana dins d'una
    mateixa transacció amb la fila de la setmana bloquejada. Cap transició
    fa retrocedir la fase; repetir-ne una llença PhaseMismatch.
    """

    def __init__(
        self,
        quorum: Optional[int] = None,
        rng: Optional[random.Random] = None,
        nominations: Optional[NominationRegistry] = None,
        ballots: Optional[BallotStore] = None,
    ):
        self.quorum = min_nominations() if quorum is None else int(quorum)
        self.rng = rng or random.Random()
        self.nominations = nominations or NominationRegistry()
        self.ballots = ballots or BallotStore()

    # ---------- accions de membre ----------

    def propose_nomination(self, week_date, member, film: dict):
        return self.nominations.propose(week_date, member, film)

    def submit_ballot(self, week_date, member, ranking: dict):
        return self.ballots.submit(week_date, member, ranking)

    # ---------- transicions ----------

    def _resolve_genre(self, genre_id=None, custom_genre=None, random_pick=False) -> Tuple[str, str]:
        modes = sum([genre_id is not None, bool((custom_genre or "").strip()), bool(random_pick)])
        if modes != 1:
            raise InvalidGenre("Choose exactly one of: a catalog genre, a custom genre or a random genre.")

        if genre_id is not None:
            genre = Genre.objects.filter(pk=genre_id, is_active=True).first()
            if genre is None:
                raise NotFound(f"Genre {genre_id} not found.")
            return genre.name, Week.GenreSource.CATALOG

        if random_pick:
            active = list(Genre.objects.filter(is_active=True).order_by("name", "id"))
            if not active:
                raise NotFound("There are no active genres to pick from.")
            return self.rng.choice(active).name, Week.GenreSource.RANDOM

        name = custom_genre.strip()
        max_len = int(getattr(settings, "FILMCLUB_MAX_GENRE_LENGTH", 50))
        if len(name) > max_len:
            raise InvalidGenre(f"Genre name is too long (max {max_len} characters).")
        if "<" in name or ">" in name:
            raise InvalidGenre("Invalid characters in genre name.")

        # un gènere lliure passa a formar part del catàleg
        genre = Genre.objects.filter(name__iexact=name).first()
        if genre is None:
            genre = Genre.objects.create(name=name)
        return genre.name, Week.GenreSource.CUSTOM

    def set_genre(self, week_date, *, genre_id=None, custom_genre=None, random_pick=False, acting_member=None) -> Week:
        """planning -> nomination. Crea la setmana si encara no existeix."""
        member = resolve_member(acting_member) if acting_member is not None else None

        with storage_errors("set genre"), transaction.atomic():
            week = weeks.lock_or_create_week(week_date)
            current = require_phase(week.phase, Phase.PLANNING, action="set genre")

            genre, source = self._resolve_genre(genre_id, custom_genre, random_pick)
            week.genre = genre
            week.genre_source = source
            week.genre_set_by = member
            week.phase = advance(current, Phase.NOMINATION)
            week.save(update_fields=["genre", "genre_source", "genre_set_by", "phase"])

        logger.info(
            "Week %s genre set to %r (%s) by %s",
            week.week_date, week.genre, week.genre_source, member.name if member else "-",
        )
        return week

    def open_voting(self, week_date) -> Week:
        """nomination -> voting, només amb quòrum de nominacions."""
        with storage_errors("open voting"), transaction.atomic():
            week = weeks.lock_week(week_date)
            current = require_phase(weeks.phase_of(week), Phase.NOMINATION, action="open voting")

            count = week.nominations.count()
            if count < self.quorum:
                logger.warning("Quorum not met for week %s: %s/%s", week.week_date, count, self.quorum)
                raise QuorumNotMet(count=count, required=self.quorum)

            week.phase = advance(current, Phase.VOTING)
            week.save(update_fields=["phase"])

        logger.info("Week %s voting opened with %s nominations", week.week_date, count)
        return week

    def calculate_results(self, week_date) -> Tuple[Week, EngineResult]:
        """
        voting -> complete. Recompte i persistència del guanyador en la
        mateixa transacció: si falla el desat, la fase no avança.
        """
        with storage_errors("calculate results"), transaction.atomic():
            week = weeks.lock_week(week_date)
            current = require_phase(weeks.phase_of(week), Phase.VOTING, action="calculate results")

            candidates = [
                Candidate(
                    nomination_id=n.id,
                    title=n.film_title,
                    year=n.film_year,
                    nominated_at=n.nominated_at,
                )
                for n in week.nominations.all()
            ]
            ballots = self.ballots.all_for(week.week_date)
            result = ScoringEngine(candidates).compute(ballot_inputs(ballots))

            week.winning_nomination_id = result.winning_nomination_id
            week.winning_score = result.winning_score
            week.results = {
                **result.as_dict(),
                "ballot_count": len(ballots),
                "calculated_at": timezone.now().isoformat(),
            }
            week.phase = advance(current, Phase.COMPLETE)
            week.completed_at = timezone.now()
            week.save(update_fields=[
                "winning_nomination", "winning_score", "results", "phase", "completed_at",
            ])

        logger.info(
            "Week %s complete: winner=%s score=%s ballots=%s tied=%s",
            week.week_date, result.winning_nomination_id, result.winning_score, len(ballots), result.tied,
        )
        return week, result
