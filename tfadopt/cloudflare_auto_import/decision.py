from enum import Enum


class Decision(Enum):
    NOT_DECLARED = "not-declared"
    NOT_FOUND = "not-found"
    IMPORT = "import"
    SKIP = "skip"
    EVICT = "evict"


def decide(
    declared: bool,
    candidate_id: str | None,
    bound: bool,
    remote_live: bool | None = None,
) -> Decision:
    """Next step for one resource address.

    remote_live is the result of the targeted lookup of the bound id and
    only matters for bound addresses. After an EVICT the caller asks
    again with bound=False.
    """
    if not declared:
        return Decision.NOT_DECLARED
    if bound:
        return Decision.SKIP if remote_live else Decision.EVICT
    if candidate_id:
        return Decision.IMPORT
    return Decision.NOT_FOUND
