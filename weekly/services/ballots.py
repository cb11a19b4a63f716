# services/ballots.py
import logging

from django.db import IntegrityError, transaction

from ..exceptions import DuplicateBallot, storage_errors
from ..models import Ballot, BallotEntry
from ..phases import Phase, require_phase
from ..scoring_engine import BallotInput, validate_ranking
from . import weeks
from .members import resolve_member


logger = logging.getLogger(__name__)


class BallotStore:
    """
    Un vot per membre i setmana. Un vot emès és definitiu: no hi ha
    modificació ni esborrat.
    """

    def submit(self, week_date, member, ranking: dict) -> Ballot:
        member = resolve_member(member)

        with storage_errors("submit ballot"), transaction.atomic():
            week = weeks.lock_week(week_date)
            require_phase(weeks.phase_of(week), Phase.VOTING, action="submit ballot")

            nomination_ids = list(week.nominations.values_list("id", flat=True))
            normalized = validate_ranking(ranking, nomination_ids)

            try:
                with transaction.atomic():
                    ballot = Ballot.objects.create(week=week, member=member)
                    BallotEntry.objects.bulk_create([
                        BallotEntry(ballot=ballot, nomination_id=nid, points=pts)
                        for nid, pts in sorted(normalized.items())
                    ])
            except IntegrityError:
                if Ballot.objects.filter(week=week, member=member).exists():
                    logger.warning("Duplicate ballot rejected week=%s member=%s", week.week_date, member.name)
                    raise DuplicateBallot()
                raise

        logger.info("Ballot %s submitted week=%s member=%s", ballot.id, week.week_date, member.name)
        return ballot

    def all_for(self, week_date):
        with storage_errors("list ballots"):
            return list(
                Ballot.objects
                .filter(week__week_date=weeks.parse_week_date(week_date))
                .select_related("member")
                .prefetch_related("entries")
                .order_by("submitted_at", "id")
            )

    def voters_for(self, week_date):
        return [b.member.name for b in self.all_for(week_date)]


def ballot_inputs(ballots) -> list:
    """Ballots persistits -> entrades pures per al ScoringEngine."""
    return [BallotInput(voter=b.member.name, ranking=b.ranking()) for b in ballots]
