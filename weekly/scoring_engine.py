# scoring_engine.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .exceptions import InvalidRanking, WorkflowError


class ScoringError(WorkflowError):
    code = "scoring_error"
    status = 409


def to_int(v: Any) -> int:
    """
    Enter estricte: accepta int o text numèric ("3"). Rebutja bool, float i buits.
    """
    if isinstance(v, bool):
        raise ValueError(f"not an integer: {v!r}")
    if isinstance(v, int):
        return v
    if isinstance(v, str) and v.strip().lstrip("-").isdecimal():
        return int(v.strip())
    raise ValueError(f"not an integer: {v!r}")


def points_from_order(order: Sequence[Any]) -> Dict[int, int]:
    """
    Ordre de preferència (primer = preferit) -> {nomination_id: punts}.
    El primer rep N punts, l'últim 1.
    """
    if not isinstance(order, (list, tuple)):
        raise InvalidRanking("The ranking order must be a list of nomination ids.")
    try:
        ids = [to_int(x) for x in order]
    except ValueError as exc:
        raise InvalidRanking(f"Invalid nomination id in ranking order: {exc}") from exc
    if len(set(ids)) != len(ids):
        raise InvalidRanking("A film appears more than once in the ranking order.")
    n = len(ids)
    return {nid: n - pos for pos, nid in enumerate(ids)}


def validate_ranking(ranking: Any, nomination_ids: Iterable[int]) -> Dict[int, int]:
    """
    Comprova que `ranking` sigui exactament una permutació de 1..N sobre
    les nominacions de la setmana. Retorna el rànquing normalitzat.
    """
    if not isinstance(ranking, dict):
        raise InvalidRanking("The ranking must map nomination ids to points.")

    expected = set(nomination_ids)
    n = len(expected)
    if n == 0:
        raise InvalidRanking("There are no nominations to rank.")

    normalized: Dict[int, int] = {}
    for raw_id, raw_points in ranking.items():
        try:
            nid = to_int(raw_id)
            pts = to_int(raw_points)
        except ValueError as exc:
            raise InvalidRanking(f"Malformed ranking entry: {exc}") from exc
        if nid in normalized:
            raise InvalidRanking(f"Nomination {nid} is ranked twice.")
        normalized[nid] = pts

    extra = set(normalized) - expected
    if extra:
        raise InvalidRanking(f"Unknown nominations for this week: {sorted(extra)}")
    missing = expected - set(normalized)
    if missing:
        raise InvalidRanking(f"Every film must be ranked; missing: {sorted(missing)}")

    out_of_range = sorted(p for p in normalized.values() if p < 1 or p > n)
    if out_of_range:
        raise InvalidRanking(f"Points must be between 1 and {n}; got {out_of_range}")
    if len(set(normalized.values())) != n:
        raise InvalidRanking("Each point value must be used exactly once (no ties).")

    return normalized


@dataclass(frozen=True)
class Candidate:
    nomination_id: int
    title: str = ""
    year: Optional[int] = None
    nominated_at: Optional[datetime] = None

    def tie_break_key(self):
        # nominació més antiga primer; després id més baix
        ts = self.nominated_at.timestamp() if self.nominated_at else float("inf")
        return (ts, self.nomination_id)


@dataclass(frozen=True)
class BallotInput:
    voter: str
    ranking: Dict[int, int]


@dataclass
class NominationScore:
    nomination_id: int
    title: str
    year: Optional[int]
    total_score: int = 0
    voter_contributions: Dict[str, int] = field(default_factory=dict)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "nomination_id": self.nomination_id,
            "film_title": self.title,
            "film_year": self.year,
            "total_score": self.total_score,
            "vote_count": len(self.voter_contributions),
            "voter_contributions": dict(self.voter_contributions),
        }


@dataclass
class EngineResult:
    winning_nomination_id: int
    winning_score: int
    breakdown: List[NominationScore]
    tied: List[int] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "winning_nomination_id": self.winning_nomination_id,
            "winning_score": self.winning_score,
            "tied": list(self.tied),
            "breakdown": [row.as_dict() for row in self.breakdown],
        }


class ScoringEngine:
    """
    Recompte posicional: el total d'una nominació és la suma dels punts
    que rep a tots els vots. Guanya el total més alt.

    Empats: guanya la nominació feta abans (i, si coincideix, la d'id més
    baix). No depèn de l'ordre en què arribin els vots ni les files.
    """

    def __init__(self, candidates: Sequence[Candidate]):
        if not candidates:
            raise ScoringError("There are no nominations to score.")
        ids = [c.nomination_id for c in candidates]
        if len(set(ids)) != len(ids):
            raise ScoringError("Duplicate nomination ids in candidate list.")
        self.candidates = sorted(candidates, key=lambda c: c.tie_break_key())
        self.nomination_ids = [c.nomination_id for c in self.candidates]

    def compute(self, ballots: Iterable[BallotInput]) -> EngineResult:
        rows = {
            c.nomination_id: NominationScore(nomination_id=c.nomination_id, title=c.title, year=c.year)
            for c in self.candidates
        }

        for ballot in ballots:
            ranking = validate_ranking(ballot.ranking, self.nomination_ids)
            for nid, pts in ranking.items():
                row = rows[nid]
                row.total_score += pts
                row.voter_contributions[ballot.voter] = pts

        order = {nid: i for i, nid in enumerate(self.nomination_ids)}
        breakdown = sorted(rows.values(), key=lambda r: (-r.total_score, order[r.nomination_id]))

        winner = breakdown[0]
        tied = [r.nomination_id for r in breakdown if r.total_score == winner.total_score]

        return EngineResult(
            winning_nomination_id=winner.nomination_id,
            winning_score=winner.total_score,
            breakdown=breakdown,
            tied=tied if len(tied) > 1 else [],
        )
