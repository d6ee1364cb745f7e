# e2e/map_e2e/flows/runner.py
from __future__ import annotations

from typing import Callable, Dict

from playwright.sync_api import Page

from map_e2e.core.artifacts import Artifacts
from map_e2e.core.types import Scenario
from map_e2e.flows.map_flow import (
    run_core_elements,
    run_filter_toggle,
    run_map_interactive,
    run_mobile_layout,
    run_nav_links,
    run_performance,
    run_venue_data,
)

FLOWS: Dict[str, Callable[[Scenario, Page, Artifacts], bool]] = {
    "core_elements": run_core_elements,
    "filter_toggle": run_filter_toggle,
    "map_interactive": run_map_interactive,
    "performance": run_performance,
    "venue_data": run_venue_data,
    "nav_links": run_nav_links,
    "mobile_layout": run_mobile_layout,
}


def run_scenario(sc: Scenario, page: Page, artifacts: Artifacts, tracing_stop) -> bool:
    """
    tracing_stop comes from conftest: tracing_stop(path, failed) saves or drops the trace
    according to the trace mode. It is always called.
    """
    ok = False
    try:
        flow = FLOWS.get(sc.check)
        if flow is None:
            artifacts.save_debug(page, "unknown_check")
            raise ValueError(f"Unknown check: {sc.check}")
        ok = flow(sc, page, artifacts)
        return ok
    finally:
        artifacts.save_last(page)
        tracing_stop(artifacts.path("trace.zip"), not ok)
