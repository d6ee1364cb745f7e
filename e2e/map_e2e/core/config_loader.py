from __future__ import annotations

import dataclasses
import os
from pathlib import Path
from typing import List, Any, Dict, Mapping

import yaml

from .exceptions import ConfigError
from .types import (
    BrowserProject,
    RunConfig,
    Scenario,
    SCREENSHOT_MODES,
    TRACE_MODES,
)

E2E_DIR = Path(__file__).resolve().parents[2]
DEFAULT_RUN_CONFIG = E2E_DIR / "config" / "run.yaml"
DEFAULT_SCENARIO_FILE = E2E_DIR / "scenarios" / "scenarios.yaml"

CHECKS = (
    "core_elements",
    "filter_toggle",
    "map_interactive",
    "performance",
    "venue_data",
    "nav_links",
    "mobile_layout",
)


def truthy(v: str | None) -> bool:
    return (v or "").strip().lower() in ("1", "true", "yes", "y", "on")


def _read_yaml(p: Path, kind: str) -> Any:
    if not p.exists():
        raise FileNotFoundError(f"{kind} file not found: {p.resolve()}")
    return yaml.safe_load(p.read_text(encoding="utf-8"))


def _pick(value: Any, is_ci: bool) -> Any:
    """
    CI-sensitive keys may be written as {ci: ..., local: ...}.
    Plain values apply to both.
    """
    if isinstance(value, dict) and ("ci" in value or "local" in value):
        return value.get("ci" if is_ci else "local")
    return value


def load_run_config(
    path: str | Path | None = None,
    env: Mapping[str, str] | None = None,
) -> RunConfig:
    env = os.environ if env is None else env
    p = Path(path or env.get("RUN_CONFIG") or DEFAULT_RUN_CONFIG)

    raw = _read_yaml(p, "Run config")
    if not isinstance(raw, dict):
        raise ConfigError("run.yaml must be a mapping")

    is_ci = truthy(env.get("CI"))

    retries = int(_pick(raw.get("retries", {"ci": 1, "local": 0}), is_ci) or 0)
    if retries < 0:
        raise ConfigError(f"retries must be >= 0: {retries}")

    workers = _pick(raw.get("workers", {"ci": 1, "local": None}), is_ci)
    if workers is not None:
        workers = int(workers)
        if workers < 1:
            raise ConfigError(f"workers must be >= 1 or null: {workers}")

    trace = str(raw.get("trace", "on-first-retry"))
    if trace not in TRACE_MODES:
        raise ConfigError(f"Unknown trace mode '{trace}', expected one of {TRACE_MODES}")

    screenshot = str(raw.get("screenshot", "only-on-failure"))
    if screenshot not in SCREENSHOT_MODES:
        raise ConfigError(
            f"Unknown screenshot mode '{screenshot}', expected one of {SCREENSHOT_MODES}"
        )

    base_url = env.get("E2E_BASE_URL") or raw.get("base_url")
    if not base_url:
        raise ConfigError("base_url is required (run.yaml or E2E_BASE_URL)")

    projects = [_to_project(row, env, is_ci) for row in (raw.get("projects") or [])]
    if not projects:
        raise ConfigError("run.yaml must declare at least one project")

    return RunConfig(
        base_url=str(base_url).rstrip("/"),
        projects=projects,
        test_dir=str(raw.get("test_dir", "e2e/tests")),
        fully_parallel=bool(raw.get("fully_parallel", True)),
        forbid_only=bool(_pick(raw.get("forbid_only", {"ci": True, "local": False}), is_ci)),
        retries=retries,
        workers=workers,
        reporter=str(raw.get("reporter", "html")),
        report_path=str(raw.get("report_path", "playwright-report/index.html")),
        trace=trace,
        screenshot=screenshot,
        artifact_dir=Path(env.get("ARTIFACT_DIR", "artifacts")),
        timeout_ms=int(env.get("PW_TIMEOUT_MS", "30000")),
        nav_timeout_ms=int(env.get("PW_NAV_TIMEOUT_MS", "45000")),
        slow_mo_ms=int(env.get("PW_SLOWMO_MS", "0")),
        is_ci=is_ci,
    )


def _to_project(d: Any, env: Mapping[str, str], is_ci: bool) -> BrowserProject:
    if not isinstance(d, dict) or "name" not in d:
        raise ConfigError(f"Each project must be a dict with a name: {d}")

    # PW_HEADLESS wins; otherwise CI always runs headless
    if env.get("PW_HEADLESS") is not None:
        headless = truthy(env.get("PW_HEADLESS"))
    else:
        headless = bool(d.get("headless", False)) or is_ci

    args = d.get("args") or []
    if not isinstance(args, list):
        raise ConfigError(f"project args must be a list: {d['name']}")

    return BrowserProject(
        name=str(d["name"]),
        browser=str(d.get("browser", "chromium")),
        channel=env.get("PW_CHANNEL") or d.get("channel"),
        device=d.get("device"),
        headless=headless,
        args=[str(a) for a in args],
    )


def load_scenarios(path: str | Path | None = None) -> List[Scenario]:
    p = Path(path or os.getenv("SCENARIO_FILE") or DEFAULT_SCENARIO_FILE)

    raw = _read_yaml(p, "Scenario")
    if not isinstance(raw, list):
        raise ConfigError("scenarios.yaml must be a list")

    out: List[Scenario] = []
    for row in raw:
        if not isinstance(row, dict):
            raise ConfigError("Each scenario must be a dict")
        out.append(_to_scenario(row))

    ids = [sc.id for sc in out]
    dupes = sorted({i for i in ids if ids.count(i) > 1})
    if dupes:
        raise ConfigError(f"Duplicate scenario ids: {dupes}")
    return out


def _to_scenario(d: Dict[str, Any]) -> Scenario:
    required = ["id", "check", "name"]
    for k in required:
        if k not in d:
            raise ConfigError(f"Missing key '{k}' in scenario: {d}")

    if d["check"] not in CHECKS:
        raise ConfigError(f"Unknown check '{d['check']}' in scenario: {d.get('id')}")

    params = d.get("params")
    if params is not None and not isinstance(params, dict):
        raise ConfigError(f"params must be dict: {d.get('id')}")

    path = str(d.get("path", "/map"))
    if not path.startswith("/"):
        raise ConfigError(f"path must be relative to base_url (leading '/'): {d.get('id')}")

    viewport = str(d.get("viewport", "desktop"))
    if viewport not in ("desktop", "mobile"):
        raise ConfigError(f"viewport must be desktop or mobile: {d.get('id')}")

    return Scenario(
        id=str(d["id"]),
        check=d["check"],
        name=str(d["name"]),
        path=path,
        viewport=viewport,
        params=params,
    )


def run_config_to_dict(cfg: RunConfig) -> Dict[str, Any]:
    out = dataclasses.asdict(cfg)
    out["artifact_dir"] = str(cfg.artifact_dir)
    return out
