# models.py
from django.db import models

from .phases import Phase


class Member(models.Model):
    name = models.CharField(max_length=50, unique=True)
    is_active = models.BooleanField(default=True)
    is_admin = models.BooleanField(default=False)
    added_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name


class Genre(models.Model):
    name = models.CharField(max_length=50, unique=True)
    is_active = models.BooleanField(default=True)
    added_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name


class Week(models.Model):
    """
    Una setmana del club, identificada pel dilluns de la setmana ISO.
    La fase només la modifica el controlador de fases (services/workflow.py).
    """

    class GenreSource(models.TextChoices):
        CATALOG = "catalog", "Catalog"
        CUSTOM = "custom", "Custom"
        RANDOM = "random", "Random"

    week_date = models.DateField(unique=True)
    phase = models.CharField(max_length=20, choices=Phase.choices, default=Phase.PLANNING, db_index=True)

    genre = models.CharField(max_length=50, blank=True, default="")
    genre_source = models.CharField(max_length=20, choices=GenreSource.choices, blank=True, default="")
    genre_set_by = models.ForeignKey(
        Member,
        null=True, blank=True,
        on_delete=models.SET_NULL,
        related_name="genres_set",
    )

    winning_nomination = models.ForeignKey(
        "Nomination",
        null=True, blank=True,
        on_delete=models.PROTECT,
        related_name="+",
    )
    winning_score = models.PositiveIntegerField(null=True, blank=True)
    # foto del recompte en tancar la setmana (no es recalcula)
    results = models.JSONField(default=dict, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-week_date"]

    def __str__(self):
        return f"{self.week_date} ({self.phase})"


class Nomination(models.Model):
    week = models.ForeignKey(Week, on_delete=models.CASCADE, related_name="nominations")
    member = models.ForeignKey(Member, on_delete=models.PROTECT, related_name="nominations")

    film_title = models.CharField(max_length=255)
    film_year = models.PositiveSmallIntegerField(null=True, blank=True)
    tmdb_id = models.PositiveIntegerField(null=True, blank=True)  # id al catàleg extern
    poster_path = models.CharField(max_length=255, blank=True, default="")

    director = models.CharField(max_length=255, blank=True, default="")
    runtime = models.PositiveSmallIntegerField(null=True, blank=True)
    overview = models.TextField(blank=True, default="")
    vote_average = models.FloatField(null=True, blank=True)

    nominated_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["nominated_at", "id"]
        constraints = [
            models.UniqueConstraint(
                fields=["week", "member"],
                name="uniq_nomination_per_member_week",
            )
        ]

    def __str__(self):
        year = f" ({self.film_year})" if self.film_year else ""
        return f"{self.film_title}{year}"


class Ballot(models.Model):
    week = models.ForeignKey(Week, on_delete=models.CASCADE, related_name="ballots")
    member = models.ForeignKey(Member, on_delete=models.PROTECT, related_name="ballots")
    submitted_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["submitted_at", "id"]
        constraints = [
            models.UniqueConstraint(
                fields=["week", "member"],
                name="uniq_ballot_per_member_week",
            )
        ]

    def ranking(self) -> dict:
        return {e.nomination_id: e.points for e in self.entries.all()}

    def __str__(self):
        return f"Ballot {self.member_id} / {self.week_id}"


class BallotEntry(models.Model):
    """
    Una fila per pel·lícula puntuada: permutació de 1..N dins de cada vot.
    """
    ballot = models.ForeignKey(Ballot, on_delete=models.CASCADE, related_name="entries")
    nomination = models.ForeignKey(Nomination, on_delete=models.PROTECT, related_name="ballot_entries")
    points = models.PositiveSmallIntegerField()

    class Meta:
        ordering = ["-points"]
        constraints = [
            models.UniqueConstraint(fields=["ballot", "nomination"], name="uniq_entry_per_nomination"),
            models.UniqueConstraint(fields=["ballot", "points"], name="uniq_entry_points"),
        ]

    def __str__(self):
        return f"{self.nomination_id}: {self.points}"
