import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Genre",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=50, unique=True)),
                ("is_active", models.BooleanField(default=True)),
                ("added_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={"ordering": ["name"]},
        ),
        migrations.CreateModel(
            name="Member",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=50, unique=True)),
                ("is_active", models.BooleanField(default=True)),
                ("is_admin", models.BooleanField(default=False)),
                ("added_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={"ordering": ["name"]},
        ),
        migrations.CreateModel(
            name="Week",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("week_date", models.DateField(unique=True)),
                (
                    "phase",
                    models.CharField(
                        choices=[
                            ("planning", "Planning"),
                            ("nomination", "Nomination"),
                            ("voting", "Voting"),
                            ("complete", "Complete"),
                        ],
                        db_index=True,
                        default="planning",
                        max_length=20,
                    ),
                ),
                ("genre", models.CharField(blank=True, default="", max_length=50)),
                (
                    "genre_source",
                    models.CharField(
                        blank=True,
                        choices=[("catalog", "Catalog"), ("custom", "Custom"), ("random", "Random")],
                        default="",
                        max_length=20,
                    ),
                ),
                ("winning_score", models.PositiveIntegerField(blank=True, null=True)),
                ("results", models.JSONField(blank=True, default=dict)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                (
                    "genre_set_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="genres_set",
                        to="weekly.member",
                    ),
                ),
            ],
            options={"ordering": ["-week_date"]},
        ),
        migrations.CreateModel(
            name="Nomination",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("film_title", models.CharField(max_length=255)),
                ("film_year", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("tmdb_id", models.PositiveIntegerField(blank=True, null=True)),
                ("poster_path", models.CharField(blank=True, default="", max_length=255)),
                ("director", models.CharField(blank=True, default="", max_length=255)),
                ("runtime", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("overview", models.TextField(blank=True, default="")),
                ("vote_average", models.FloatField(blank=True, null=True)),
                ("nominated_at", models.DateTimeField(auto_now_add=True)),
                (
                    "member",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="nominations",
                        to="weekly.member",
                    ),
                ),
                (
                    "week",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="nominations",
                        to="weekly.week",
                    ),
                ),
            ],
            options={"ordering": ["nominated_at", "id"]},
        ),
        migrations.AddField(
            model_name="week",
            name="winning_nomination",
            field=models.ForeignKey(
                blank=True,
                null=True,
                on_delete=django.db.models.deletion.PROTECT,
                related_name="+",
                to="weekly.nomination",
            ),
        ),
        migrations.AddConstraint(
            model_name="nomination",
            constraint=models.UniqueConstraint(fields=("week", "member"), name="uniq_nomination_per_member_week"),
        ),
        migrations.CreateModel(
            name="Ballot",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("submitted_at", models.DateTimeField(auto_now_add=True)),
                (
                    "member",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="ballots",
                        to="weekly.member",
                    ),
                ),
                (
                    "week",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="ballots",
                        to="weekly.week",
                    ),
                ),
            ],
            options={
                "ordering": ["submitted_at", "id"],
                "constraints": [
                    models.UniqueConstraint(fields=("week", "member"), name="uniq_ballot_per_member_week"),
                ],
            },
        ),
        migrations.CreateModel(
            name="BallotEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("points", models.PositiveSmallIntegerField()),
                (
                    "ballot",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="entries",
                        to="weekly.ballot",
                    ),
                ),
                (
                    "nomination",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="ballot_entries",
                        to="weekly.nomination",
                    ),
                ),
            ],
            options={
                "ordering": ["-points"],
                "constraints": [
                    models.UniqueConstraint(fields=("ballot", "nomination"), name="uniq_entry_per_nomination"),
                    models.UniqueConstraint(fields=("ballot", "points"), name="uniq_entry_points"),
                ],
            },
        ),
    ]
