# exceptions.py
import logging
from contextlib import contextmanager

from django.db import DatabaseError


logger = logging.getLogger(__name__)


class WorkflowError(Exception):
    """
    Base dels errors de negoci. `code` i `status` els fa servir la capa HTTP.
    """
    code = "workflow_error"
    status = 400

    def __init__(self, message: str = "", **details):
        super().__init__(message or self.default_message())
        self.details = details

    def default_message(self) -> str:
        return self.code

    def as_dict(self) -> dict:
        return {"ok": False, "error": self.code, "message": str(self)}


class PhaseMismatch(WorkflowError):
    code = "phase_mismatch"
    status = 409

    def __init__(self, message: str = "", *, current=None, expected=None, action: str = ""):
        self.current = current
        self.expected = list(expected or [])
        self.action = action
        if not message:
            exp = ", ".join(str(getattr(p, "value", p)) for p in self.expected) or "-"
            cur = getattr(current, "value", current)
            message = f"'{action or 'action'}' not allowed in phase '{cur}' (expected: {exp})."
        super().__init__(message)


class DuplicateNomination(WorkflowError):
    code = "duplicate_nomination"
    status = 409

    def default_message(self):
        return "This member already nominated a film for this week."


class DuplicateBallot(WorkflowError):
    code = "duplicate_ballot"
    status = 409

    def default_message(self):
        return "This member already voted for this week."


class QuorumNotMet(WorkflowError):
    code = "quorum_not_met"
    status = 409

    def __init__(self, message: str = "", *, count: int = 0, required: int = 0):
        self.count = count
        self.required = required
        super().__init__(message or f"At least {required} nominations are needed to open voting ({count} so far).")


class InvalidRanking(WorkflowError):
    code = "invalid_ranking"
    status = 400


class NotFound(WorkflowError):
    code = "not_found"
    status = 404


class InvalidGenre(WorkflowError):
    code = "invalid_genre"
    status = 400


class InvalidFilm(WorkflowError):
    code = "invalid_film"
    status = 400


class PersistenceError(Exception):
    """
    Error d'emmagatzematge (no de negoci). No es reintenta mai automàticament.
    """
    code = "persistence_error"
    status = 500

    def as_dict(self) -> dict:
        return {"ok": False, "error": self.code, "message": "Storage error, the action was not applied."}


@contextmanager
def storage_errors(action: str):
    """
    Converteix qualsevol DatabaseError en PersistenceError.
    Els errors de negoci passen intactes.
    """
    try:
        yield
    except DatabaseError as exc:
        logger.exception("Storage failure during %s: %s", action, exc)
        raise PersistenceError(f"{action}: {exc}") from exc
