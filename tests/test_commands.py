from io import StringIO

import pytest
from django.core.management import CommandError, call_command

from weekly.models import Week

from tests.conftest import nominate


pytestmark = pytest.mark.django_db


def run(*args):
    out = StringIO()
    call_command("week_transition", *args, stdout=out)
    return out.getvalue()


def test_set_genre(members):
    output = run("2024-03-06", "--set-genre", "Noir", "--member", "Biel")
    assert "genre 'Noir'" in output
    week = Week.objects.get(week_date="2024-03-04")
    assert week.phase == "nomination"
    assert week.genre_set_by.name == "Biel"


def test_open_voting_without_quorum(controller, week_date, nomination_week, members):
    nominate(controller, week_date, members[0], "A")
    with pytest.raises(CommandError, match="quorum_not_met"):
        run("2024-03-04", "--open-voting")

    assert "phase voting" in run("2024-03-04", "--open-voting", "--quorum", "1")


def test_calculate_reports_tie_break(voting_week):
    output = run("2024-03-04", "--calculate")
    assert "winner 'A' with 0 points" in output
    assert "tie-break among 3 films" in output
    assert Week.objects.get().phase == "complete"


def test_calculate_twice(voting_week):
    run("2024-03-04", "--calculate")
    with pytest.raises(CommandError, match="phase_mismatch"):
        run("2024-03-04", "--calculate")


def test_invalid_date():
    with pytest.raises(CommandError):
        run("04/03/2024", "--open-voting")
