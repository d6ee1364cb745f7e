from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, Optional, Dict, Any, List

Check = Literal[
    "core_elements",
    "filter_toggle",
    "map_interactive",
    "performance",
    "venue_data",
    "nav_links",
    "mobile_layout",
]
Viewport = Literal["desktop", "mobile"]
TraceMode = Literal["off", "on", "on-first-retry", "retain-on-failure"]
ScreenshotMode = Literal["off", "on", "only-on-failure"]

TRACE_MODES = ("off", "on", "on-first-retry", "retain-on-failure")
SCREENSHOT_MODES = ("off", "on", "only-on-failure")


@dataclass(frozen=True)
class Scenario:
    id: str
    check: Check
    name: str
    path: str = "/map"
    viewport: Viewport = "desktop"
    params: Optional[Dict[str, Any]] = None


@dataclass(frozen=True)
class BrowserProject:
    name: str
    browser: str = "chromium"
    channel: Optional[str] = None
    device: Optional[str] = None
    headless: bool = False
    args: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class RunConfig:
    base_url: str
    projects: List[BrowserProject]
    test_dir: str = "e2e/tests"
    fully_parallel: bool = True
    forbid_only: bool = False
    retries: int = 0
    workers: Optional[int] = None
    reporter: str = "html"
    report_path: str = "playwright-report/index.html"
    trace: TraceMode = "on-first-retry"
    screenshot: ScreenshotMode = "only-on-failure"
    artifact_dir: Path = Path("artifacts")
    timeout_ms: int = 30000
    nav_timeout_ms: int = 45000
    slow_mo_ms: int = 0
    is_ci: bool = False

    @property
    def project(self) -> BrowserProject:
        return self.projects[0]


@dataclass(frozen=True)
class NavigationTiming:
    dom_content_loaded_ms: float
    load_complete_ms: float
    ttfb_ms: float
