"""Peticions simultànies del mateix membre per a la mateixa setmana."""

import threading

import pytest
from django.db import connection

from weekly.exceptions import DuplicateBallot, DuplicateNomination
from weekly.models import Ballot, Member, Nomination
from weekly.services.workflow import WeekPhaseController

from tests.conftest import WEEK


pytestmark = pytest.mark.django_db(transaction=True)


def race(action, workers=2):
    """Llança `action` des de diversos fils alhora. Retorna resultats o excepcions."""
    barrier = threading.Barrier(workers)
    outcomes = []
    lock = threading.Lock()

    def run():
        try:
            barrier.wait(timeout=10)
            outcome = action()
        except Exception as exc:
            outcome = exc
        finally:
            connection.close()
        with lock:
            outcomes.append(outcome)

    threads = [threading.Thread(target=run) for _ in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=60)
    return outcomes


def test_simultaneous_nominations_by_same_member():
    controller = WeekPhaseController()
    ana = Member.objects.create(name="Ana")
    controller.set_genre(WEEK, custom_genre="Noir")

    outcomes = race(lambda: controller.propose_nomination(WEEK, ana.id, {"film_title": "Laura"}))

    created = [o for o in outcomes if isinstance(o, Nomination)]
    rejected = [o for o in outcomes if isinstance(o, DuplicateNomination)]
    assert (len(created), len(rejected)) == (1, 1), outcomes
    assert Nomination.objects.filter(week__week_date=WEEK, member=ana).count() == 1


def test_simultaneous_ballots_by_same_member():
    controller = WeekPhaseController()
    members = [Member.objects.create(name=name) for name in ("Ana", "Biel", "Carla")]
    controller.set_genre(WEEK, custom_genre="Noir")
    noms = [
        controller.propose_nomination(WEEK, m, {"film_title": title})
        for m, title in zip(members, ("A", "B", "C"))
    ]
    controller.open_voting(WEEK)
    ranking = {n.id: p for n, p in zip(noms, (3, 2, 1))}

    outcomes = race(lambda: controller.submit_ballot(WEEK, members[0].id, ranking))

    created = [o for o in outcomes if isinstance(o, Ballot)]
    rejected = [o for o in outcomes if isinstance(o, DuplicateBallot)]
    assert (len(created), len(rejected)) == (1, 1), outcomes
    assert Ballot.objects.filter(week__week_date=WEEK, member=members[0]).count() == 1
    [ballot] = Ballot.objects.all()
    assert ballot.ranking() == ranking
