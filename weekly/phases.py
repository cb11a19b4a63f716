# phases.py
from django.db import models

from .exceptions import PhaseMismatch


class Phase(models.TextChoices):
    PLANNING = "planning", "Planning"
    NOMINATION = "nomination", "Nomination"
    VOTING = "voting", "Voting"
    COMPLETE = "complete", "Complete"


# ordre estricte: una setmana només avança
ORDER = [Phase.PLANNING, Phase.NOMINATION, Phase.VOTING, Phase.COMPLETE]


def rank(phase) -> int:
    return ORDER.index(Phase(phase))


def require_phase(current, *allowed, action: str = ""):
    """
    Valida que la fase actual sigui una de les permeses.
    Retorna la fase tipada o llença PhaseMismatch.
    """
    current = Phase(current)
    if current not in allowed:
        raise PhaseMismatch(
            current=current,
            expected=list(allowed),
            action=action,
        )
    return current


def advance(current, target) -> Phase:
    """
    Transició única: `target` ha de ser la fase immediatament següent.
    Mai retrocedeix ni salta fases.
    """
    current = Phase(current)
    target = Phase(target)
    step = rank(target)
    if step != rank(current) + 1:
        source = [ORDER[step - 1]] if step > 0 else []
        raise PhaseMismatch(current=current, expected=source, action=f"advance to {target.value}")
    return target
