import pytest

from map_e2e.core.timing import parse_navigation_timing, threshold_violations


def test_parse_navigation_timing():
    t = parse_navigation_timing({"domContentLoaded": 812.5, "loadComplete": 2400, "ttfb": 120.2})
    assert t.dom_content_loaded_ms == 812.5
    assert t.load_complete_ms == 2400.0
    assert t.ttfb_ms == 120.2


def test_parse_navigation_timing_missing_entry():
    with pytest.raises(ValueError):
        parse_navigation_timing(None)


def test_within_thresholds():
    assert threshold_violations(7999, 14999, 1999) == []


def test_bounds_are_strict():
    out = threshold_violations(8000, 15000, 2000)
    assert len(out) == 3
    assert out[0].startswith("dom_content_loaded")
    assert out[1].startswith("map_attach")
    assert out[2].startswith("ttfb")


def test_custom_thresholds():
    assert threshold_violations(500, 900, 100, max_dom_load_ms=400) == ["dom_content_loaded 500ms >= 400ms"]


@pytest.mark.parametrize(
    "entry",
    [
        {"domContentLoaded": 812.5, "loadComplete": 2400},
        {"domContentLoaded": 812.5, "loadComplete": 2400, "ttfb": None},
    ],
)
def test_parse_navigation_timing_incomplete_entry(entry):
    with pytest.raises(ValueError, match="ttfb"):
        parse_navigation_timing(entry)
