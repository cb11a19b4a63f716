# services/excel_export.py
import io

import pandas as pd

from ..exceptions import storage_errors
from ..models import Week


COLUMNS = [
    "Week", "Phase", "Genre", "Genre source", "Genre set by",
    "Nominations", "Ballots", "Winner", "Year", "Nominated by", "Score",
]


def history_rows():
    with storage_errors("history export"):
        weeks = list(
            Week.objects
            .select_related("genre_set_by", "winning_nomination__member")
            .prefetch_related("nominations", "ballots")
            .order_by("week_date")
        )

    rows = []
    for w in weeks:
        win = w.winning_nomination
        rows.append({
            "Week": w.week_date,
            "Phase": w.get_phase_display(),
            "Genre": w.genre or "",
            "Genre source": w.get_genre_source_display() if w.genre_source else "",
            "Genre set by": w.genre_set_by.name if w.genre_set_by else "",
            "Nominations": "; ".join(str(n) for n in w.nominations.all()),
            "Ballots": len(w.ballots.all()),
            "Winner": win.film_title if win else "",
            "Year": win.film_year if win and win.film_year else "",
            "Nominated by": win.member.name if win else "",
            "Score": w.winning_score if w.winning_score is not None else "",
        })
    return rows


def export_history_to_excel() -> bytes:
    df = pd.DataFrame(history_rows(), columns=COLUMNS)
    buffer = io.BytesIO()
    df.to_excel(buffer, index=False, sheet_name="Weeks", engine="openpyxl")
    return buffer.getvalue()
