# services/members.py
from ..exceptions import NotFound
from ..models import Member


def resolve_member(ref) -> Member:
    """
    Resol una referència opaca de membre (id numèric, nom o instància).
    Només membres actius.
    """
    if isinstance(ref, Member):
        if not ref.is_active:
            raise NotFound(f"Member '{ref.name}' is not active.")
        return ref

    if ref is None or str(ref).strip() == "":
        raise NotFound("A member reference is required.")

    raw = str(ref).strip()
    qs = Member.objects.filter(is_active=True)
    # isdecimal: "²" és isdigit però int() no l'accepta
    member = qs.filter(pk=int(raw)).first() if raw.isdecimal() else None
    if member is None:
        member = qs.filter(name=raw).first()
    if member is None:
        raise NotFound(f"Member '{raw}' not found.")
    return member
