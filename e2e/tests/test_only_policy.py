import pytest

from map_e2e.core.exceptions import ForbiddenOnlyError
from map_e2e.core.only_policy import apply_only_policy


class _Item:
    def __init__(self, nodeid, marks=()):
        self.nodeid = nodeid
        self._marks = set(marks)

    def get_closest_marker(self, name):
        return object() if name in self._marks else None


def test_nothing_marked_selects_all():
    items = [_Item("a"), _Item("b")]
    selected, deselected = apply_only_policy(items, forbid_only=True)
    assert selected == items
    assert deselected == []


def test_only_mark_narrows_run_locally():
    a, b, c = _Item("a"), _Item("b", marks=["only"]), _Item("c")
    selected, deselected = apply_only_policy([a, b, c], forbid_only=False)
    assert selected == [b]
    assert deselected == [a, c]


def test_only_mark_is_rejected_when_forbidden():
    items = [_Item("t::a", marks=["only"]), _Item("t::b")]
    with pytest.raises(ForbiddenOnlyError) as exc:
        apply_only_policy(items, forbid_only=True)
    assert exc.value.node_ids == ["t::a"]
    assert "t::a" in str(exc.value)
