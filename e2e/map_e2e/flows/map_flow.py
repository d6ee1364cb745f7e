# e2e/map_e2e/flows/map_flow.py
from __future__ import annotations

import logging
import re
import time
from typing import Any, Dict

from playwright.sync_api import Page, Error as PlaywrightError

from map_e2e.core.artifacts import Artifacts
from map_e2e.core.text import first_int, name_pattern
from map_e2e.core.timing import parse_navigation_timing, threshold_violations
from map_e2e.core.types import Scenario
from map_e2e.core.url import is_root_relative
from map_e2e.core.waits import wait_for_text, wait_until_text_changes, wait_until_text_stable
from map_e2e.selectors import map_selectors as S

logger = logging.getLogger(__name__)

# expect() default in the original runner
DEFAULT_EXPECT_TIMEOUT_MS = 5000


def _get_params(sc: Scenario) -> Dict[str, Any]:
    return sc.params if isinstance(sc.params, dict) else {}


def _fail(page: Page, artifacts: Artifacts, tag: str, reason: str) -> bool:
    logger.warning("[%s] %s: %s", artifacts.scenario_id, tag, reason)
    artifacts.save_debug(page, tag)
    return False


def _goto(page: Page, sc: Scenario, artifacts: Artifacts, wait_until: str = "load", networkidle: bool = False) -> bool:
    try:
        page.goto(sc.path, wait_until=wait_until)
        if networkidle:
            page.wait_for_load_state("networkidle")
        return True
    except PlaywrightError as e:
        return _fail(page, artifacts, "navigation_failed", str(e))


def _wait_map_visible(page: Page, artifacts: Artifacts, selector: str, timeout_ms: int) -> bool:
    try:
        page.locator(selector).first.wait_for(state="visible", timeout=timeout_ms)
        return True
    except PlaywrightError as e:
        return _fail(page, artifacts, "map_not_visible", str(e))


def run_core_elements(sc: Scenario, page: Page, artifacts: Artifacts) -> bool:
    params = _get_params(sc)
    expect_ms = int(params.get("timeout_ms", DEFAULT_EXPECT_TIMEOUT_MS))

    if not _goto(page, sc, artifacts):
        return False

    try:
        page.locator(S.HEADER_SELECTOR).first.wait_for(state="visible", timeout=expect_ms)
    except PlaywrightError as e:
        return _fail(page, artifacts, "header_not_visible", str(e))

    if not _wait_map_visible(page, artifacts, S.MAP_SURFACE_SELECTOR, int(params.get("map_timeout_ms", 15000))):
        return False

    filters = page.get_by_role("button", name=name_pattern(params.get("filter_pattern", S.FILTER_NAME_PATTERN)))
    if filters.count() < 1:
        return _fail(page, artifacts, "filters_missing", "no category filter button found")

    try:
        page.get_by_role("link", name=name_pattern(params.get("join_pattern", S.JOIN_PATTERN))).first.wait_for(
            state="visible", timeout=expect_ms
        )
    except PlaywrightError as e:
        return _fail(page, artifacts, "join_cta_not_visible", str(e))

    return True


def _click_filter(page: Page, artifacts: Artifacts, name: str) -> bool:
    """Click a category filter and wait for the venue request it triggers."""
    try:
        page.get_by_role("button", name=name).first.click()
        page.wait_for_load_state("networkidle")
        return True
    except PlaywrightError as e:
        return _fail(page, artifacts, f"filter_click_failed_{name}", str(e))


def run_filter_toggle(sc: Scenario, page: Page, artifacts: Artifacts) -> bool:
    """
    Pool & beach -> Fitness must change the "N venues" heading.
    Only "differs" is checked, not the direction of the change.
    """
    params = _get_params(sc)
    categories = params.get("categories") or S.FILTER_CATEGORIES
    first_filter = params.get("first_filter", "Pool & beach")
    second_filter = params.get("second_filter", "Fitness")
    filter_timeout_ms = int(params.get("filter_timeout_ms", 10000))
    settle_sec = float(params.get("settle_timeout_sec", 10))
    stable_sec = float(params.get("stable_sec", 1))

    if not _goto(page, sc, artifacts, networkidle=True):
        return False

    for category in categories:
        try:
            page.get_by_role("button", name=category).first.wait_for(state="visible", timeout=filter_timeout_ms)
        except PlaywrightError as e:
            return _fail(page, artifacts, f"filter_not_visible_{category}", str(e))

    heading = (
        page.locator(S.VENUE_HEADING_SELECTOR)
        .filter(has_text=re.compile(S.VENUE_HEADING_TEXT_PATTERN, re.IGNORECASE))
        .first
    )

    # the heading may only exist once a filter is picked
    before = (wait_for_text(heading, timeout_sec=1) or "") if heading.count() > 0 else ""

    if not _click_filter(page, artifacts, first_filter):
        return False
    if not wait_until_text_changes(heading, before, timeout_sec=settle_sec):
        return _fail(
            page,
            artifacts,
            "venue_heading_not_updated",
            f"heading stayed '{before}' after {first_filter}",
        )
    initial = wait_until_text_stable(heading, stable_sec=stable_sec, timeout_sec=settle_sec)
    if initial is None:
        return _fail(page, artifacts, "venue_heading_unstable", f"heading kept changing after {first_filter}")

    if not _click_filter(page, artifacts, second_filter):
        return False
    if not wait_until_text_changes(heading, initial, timeout_sec=settle_sec):
        return _fail(
            page,
            artifacts,
            "venue_heading_unchanged",
            f"heading stayed '{initial}' after {first_filter} -> {second_filter}",
        )

    return True


def run_map_interactive(sc: Scenario, page: Page, artifacts: Artifacts) -> bool:
    params = _get_params(sc)

    if not _goto(page, sc, artifacts):
        return False

    if not _wait_map_visible(page, artifacts, S.MAP_CONTAINER_SELECTOR, int(params.get("map_timeout_ms", 15000))):
        return False

    canvas = page.locator(S.MAP_CANVAS_SELECTOR).first
    try:
        canvas.wait_for(state="attached", timeout=int(params.get("timeout_ms", DEFAULT_EXPECT_TIMEOUT_MS)))
    except PlaywrightError as e:
        return _fail(page, artifacts, "map_canvas_not_attached", str(e))

    zoom_in = page.locator(S.ZOOM_IN_SELECTOR)
    if zoom_in.count() > 0:
        try:
            zoom_in.first.click()
            page.locator(S.ZOOM_OUT_SELECTOR).first.click()
        except PlaywrightError as e:
            return _fail(page, artifacts, "map_zoom_failed", str(e))
        return True

    box = canvas.bounding_box()
    if not box or box["width"] <= 0 or box["height"] <= 0:
        return _fail(page, artifacts, "map_canvas_zero_size", f"bounding box: {box}")
    return True


def run_performance(sc: Scenario, page: Page, artifacts: Artifacts) -> bool:
    """
    DOMContentLoaded, map attach and TTFB, all from the same page load.
    Fixed upper bounds, not a benchmark.
    """
    params = _get_params(sc)
    max_dom_ms = float(params.get("max_dom_content_loaded_ms", 8000))
    max_map_ms = float(params.get("max_map_attach_ms", 15000))
    max_ttfb_ms = float(params.get("max_ttfb_ms", 2000))

    start = time.monotonic()
    if not _goto(page, sc, artifacts, wait_until="domcontentloaded"):
        return False
    dom_load_ms = (time.monotonic() - start) * 1000

    try:
        page.locator(S.MAP_CANVAS_SELECTOR).first.wait_for(state="attached", timeout=max_map_ms)
    except PlaywrightError as e:
        return _fail(page, artifacts, "map_canvas_not_attached", str(e))
    map_attach_ms = (time.monotonic() - start) * 1000

    try:
        timing = parse_navigation_timing(page.evaluate(S.NAVIGATION_TIMING_JS))
    except (PlaywrightError, ValueError) as e:
        return _fail(page, artifacts, "navigation_timing_unavailable", str(e))

    metrics = {
        "dom_load_wall_ms": round(dom_load_ms, 1),
        "map_attach_wall_ms": round(map_attach_ms, 1),
        "dom_content_loaded_ms": timing.dom_content_loaded_ms,
        "load_complete_ms": timing.load_complete_ms,
        "ttfb_ms": timing.ttfb_ms,
    }
    artifacts.write_json("performance.json", metrics)
    logger.info("[%s] performance %s", artifacts.scenario_id, metrics)

    violations = threshold_violations(
        dom_load_ms,
        map_attach_ms,
        timing.ttfb_ms,
        max_dom_load_ms=max_dom_ms,
        max_map_attach_ms=max_map_ms,
        max_ttfb_ms=max_ttfb_ms,
    )
    if violations:
        return _fail(page, artifacts, "performance_threshold", "; ".join(violations))
    return True


def run_venue_data(sc: Scenario, page: Page, artifacts: Artifacts) -> bool:
    params = _get_params(sc)

    if not _goto(page, sc, artifacts, networkidle=True):
        return False

    loading = page.get_by_text(params.get("loading_text", S.LOADING_VENUES_TEXT))
    if loading.count() > 0:
        try:
            loading.first.wait_for(state="hidden", timeout=int(params.get("loading_timeout_ms", 15000)))
        except PlaywrightError as e:
            return _fail(page, artifacts, "venues_still_loading", str(e))

    show_btn = page.get_by_role("button", name=name_pattern(params.get("show_venues_pattern", S.SHOW_VENUES_PATTERN)))
    if show_btn.count() > 0:
        label = show_btn.first.text_content() or ""
        n = first_int(label)
        if n is not None and n <= 0:
            return _fail(page, artifacts, "venue_count_not_positive", f"label: '{label}'")

    if page.locator(S.VENUE_IMAGE_SELECTOR).count() < 1:
        return _fail(page, artifacts, "venue_images_missing", "no venue image on the page")

    return True


def run_nav_links(sc: Scenario, page: Page, artifacts: Artifacts) -> bool:
    params = _get_params(sc)
    expect_ms = int(params.get("timeout_ms", DEFAULT_EXPECT_TIMEOUT_MS))

    if not _goto(page, sc, artifacts):
        return False

    for pattern in params.get("nav_patterns") or S.NAV_PATTERNS:
        link = page.get_by_role("link", name=name_pattern(pattern)).first
        try:
            link.wait_for(state="attached", timeout=expect_ms)
            href = link.get_attribute("href")
        except PlaywrightError as e:
            return _fail(page, artifacts, f"nav_link_missing_{pattern}", str(e))
        if not href or not is_root_relative(href):
            return _fail(page, artifacts, f"nav_link_bad_href_{pattern}", f"href={href!r}")

    join = page.get_by_role("link", name=name_pattern(params.get("join_pattern", S.JOIN_NOW_PATTERN))).first
    try:
        join.wait_for(state="visible", timeout=expect_ms)
        join_href = join.get_attribute("href")
    except PlaywrightError as e:
        return _fail(page, artifacts, "join_now_not_visible", str(e))
    if not join_href:
        return _fail(page, artifacts, "join_now_href_empty", "join now link has no href")

    return True


def run_mobile_layout(sc: Scenario, page: Page, artifacts: Artifacts) -> bool:
    """page comes from a 375x812 context with a mobile UA (see scenario_context_kwargs)."""
    params = _get_params(sc)

    if not _goto(page, sc, artifacts, networkidle=True):
        return False

    if page.locator(S.MENU_TOGGLE_SELECTOR).count() < 1:
        return _fail(page, artifacts, "mobile_menu_toggle_missing", "no menu toggle control")

    if not _wait_map_visible(page, artifacts, S.MAP_SURFACE_SELECTOR, int(params.get("map_timeout_ms", 15000))):
        return False

    try:
        overflow = page.evaluate(S.HORIZONTAL_OVERFLOW_JS)
    except PlaywrightError as e:
        return _fail(page, artifacts, "overflow_check_failed", str(e))
    if overflow:
        return _fail(page, artifacts, "mobile_horizontal_overflow", "scrollWidth > innerWidth")

    return True
