# services/weeks.py
from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional

from django.utils.dateparse import parse_date

from ..exceptions import NotFound
from ..models import Week
from ..phases import Phase


def week_start(d: date) -> date:
    """Dilluns de la setmana ISO que conté `d`."""
    if isinstance(d, datetime):
        d = d.date()
    return d - timedelta(days=d.weekday())


def parse_week_date(value) -> date:
    """
    Accepta date o text YYYY-MM-DD i el normalitza al dilluns.
    Llença ValueError si el format no és vàlid.
    """
    if isinstance(value, date):
        return week_start(value)
    parsed = parse_date(str(value or "").strip())
    if parsed is None:
        raise ValueError(f"Invalid date (expected YYYY-MM-DD): {value!r}")
    return week_start(parsed)


def get_week(week_date) -> Optional[Week]:
    return Week.objects.filter(week_date=parse_week_date(week_date)).first()


def get_week_or_raise(week_date) -> Week:
    week = get_week(week_date)
    if week is None:
        raise NotFound(f"No record for week {parse_week_date(week_date)}.")
    return week


def lock_week(week_date) -> Optional[Week]:
    """
    Llegeix la setmana amb bloqueig de fila. S'ha de cridar dins d'un
    transaction.atomic().
    """
    return Week.objects.select_for_update().filter(week_date=parse_week_date(week_date)).first()


def lock_or_create_week(week_date) -> Week:
    # get_or_create es protegeix amb la restricció unique de week_date
    week, _ = Week.objects.get_or_create(week_date=parse_week_date(week_date))
    return Week.objects.select_for_update().get(pk=week.pk)


def phase_of(week: Optional[Week]) -> Phase:
    """Una setmana sense registre és implícitament a 'planning'."""
    return Phase(week.phase) if week is not None else Phase.PLANNING
