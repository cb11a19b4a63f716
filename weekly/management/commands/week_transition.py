# management/commands/week_transition.py
from django.core.management.base import BaseCommand, CommandError

from ...exceptions import PersistenceError, WorkflowError
from ...services.weeks import parse_week_date
from ...services.workflow import WeekPhaseController


class Command(BaseCommand):
    help = "Avança la fase d'una setmana: fixar gènere, obrir votació o calcular resultats."

    def add_arguments(self, parser):
        parser.add_argument("week_date", help="Qualsevol dia de la setmana (YYYY-MM-DD).")
        action = parser.add_mutually_exclusive_group(required=True)
        action.add_argument("--set-genre", dest="genre", help="Gènere lliure o del catàleg.")
        action.add_argument("--random-genre", action="store_true", help="Tria un gènere actiu a l'atzar.")
        action.add_argument("--open-voting", action="store_true")
        action.add_argument("--calculate", action="store_true", help="Calcula el guanyador i tanca la setmana.")
        parser.add_argument("--member", help="Membre que fixa el gènere (id o nom).")
        parser.add_argument("--quorum", type=int, help="Mínim de nominacions (per defecte, el de settings).")

    def handle(self, *args, **opts):
        try:
            week_date = parse_week_date(opts["week_date"])
        except ValueError as exc:
            raise CommandError(str(exc))

        controller = WeekPhaseController(quorum=opts.get("quorum"))

        try:
            if opts["genre"] or opts["random_genre"]:
                week = controller.set_genre(
                    week_date,
                    custom_genre=opts["genre"],
                    random_pick=opts["random_genre"],
                    acting_member=opts.get("member"),
                )
                self.stdout.write(self.style.SUCCESS(f"{week.week_date}: genre '{week.genre}', phase {week.phase}."))

            elif opts["open_voting"]:
                week = controller.open_voting(week_date)
                self.stdout.write(self.style.SUCCESS(f"{week.week_date}: phase {week.phase}."))

            else:
                week, result = controller.calculate_results(week_date)
                winner = next(r for r in result.breakdown if r.nomination_id == result.winning_nomination_id)
                msg = f"{week.week_date}: winner '{winner.title}' with {result.winning_score} points."
                if result.tied:
                    msg += f" (tie-break among {len(result.tied)} films)"
                self.stdout.write(self.style.SUCCESS(msg))

        except (WorkflowError, PersistenceError) as exc:
            raise CommandError(f"{getattr(exc, 'code', 'error')}: {exc}")
