import datetime
import os
import tempfile

import django
from django.conf import settings

import pytest


# fitxer i no :memory:, perquè els tests amb fils comparteixin la base de dades
TEST_DB = os.path.join(tempfile.gettempdir(), f"filmclub-tests-{os.getpid()}.sqlite3")


def pytest_configure(*args):
    settings.configure(
        DEBUG_PROPAGATE_EXCEPTIONS=True,
        DATABASES={
            "default": {
                "ENGINE": "django.db.backends.sqlite3",
                "NAME": TEST_DB,
                # BEGIN IMMEDIATE: els fils concurrents esperen el bloqueig d'escriptura
                "OPTIONS": {"transaction_mode": "IMMEDIATE", "timeout": 20},
                "TEST": {"NAME": TEST_DB},
            },
        },
        SECRET_KEY="not very secret in tests",
        STATIC_URL="/static/",
        USE_TZ=True,
        TIME_ZONE="UTC",
        DEFAULT_AUTO_FIELD="django.db.models.BigAutoField",
        INSTALLED_APPS=(
            "django.contrib.admin",
            "django.contrib.auth",
            "django.contrib.contenttypes",
            "django.contrib.sessions",
            "django.contrib.messages",
            "django.contrib.staticfiles",
            "weekly",
        ),
        PASSWORD_HASHERS=("django.contrib.auth.hashers.MD5PasswordHasher",),
        ROOT_URLCONF="filmclub.urls",
        FILMCLUB_MIN_NOMINATIONS=3,
        FILMCLUB_WEEKS_PAST=4,
        FILMCLUB_WEEKS_FUTURE=12,
        FILMCLUB_MAX_SEARCH_RESULTS=5,
        TMDB_API_KEY="",
    )

    django.setup()


# dilluns
WEEK = datetime.date(2024, 3, 4)


@pytest.fixture
def week_date():
    return WEEK


@pytest.fixture
def members(db):
    from weekly.models import Member

    return [Member.objects.create(name=name) for name in ("Ana", "Biel", "Carla", "Dani")]


@pytest.fixture
def controller(db):
    from weekly.services.workflow import WeekPhaseController

    return WeekPhaseController()


@pytest.fixture
def nomination_week(controller, week_date):
    return controller.set_genre(week_date, custom_genre="Noir")


def nominate(controller, week_date, member, title, year=None):
    return controller.propose_nomination(week_date, member, {"film_title": title, "film_year": year})


@pytest.fixture
def voting_week(controller, week_date, nomination_week, members):
    """Setmana en votació amb tres nominacions: A (Ana), B (Biel), C (Carla)."""
    noms = [
        nominate(controller, week_date, members[0], "A", 1944),
        nominate(controller, week_date, members[1], "B", 1946),
        nominate(controller, week_date, members[2], "C", 1950),
    ]
    controller.open_voting(week_date)
    return noms
