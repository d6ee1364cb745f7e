from __future__ import annotations

from typing import List, Sequence, Tuple

from .exceptions import ForbiddenOnlyError

ONLY_MARK = "only"


def apply_only_policy(items: Sequence, forbid_only: bool) -> Tuple[List, List]:
    """
    (selected, deselected).
    With no only-marked item everything is selected; otherwise only the marked ones,
    unless forbid_only is on, in which case the run is refused.
    """
    marked = [it for it in items if it.get_closest_marker(ONLY_MARK) is not None]
    if not marked:
        return list(items), []
    if forbid_only:
        raise ForbiddenOnlyError(it.nodeid for it in marked)
    marked_ids = {id(it) for it in marked}
    return marked, [it for it in items if id(it) not in marked_ids]
