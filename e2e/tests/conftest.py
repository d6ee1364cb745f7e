import logging
import re
from datetime import datetime

import pytest
from dotenv import load_dotenv
from playwright.sync_api import sync_playwright, Error as PlaywrightError

from map_e2e.core.artifacts import Artifacts
from map_e2e.core.config_loader import load_run_config
from map_e2e.core.exceptions import ForbiddenOnlyError
from map_e2e.core.only_policy import apply_only_policy
from map_e2e.core.playwright_factory import launch_browser, new_context, scenario_context_kwargs
from map_e2e.core.trace_policy import should_keep, should_record
from map_e2e.core.types import RunConfig

logger = logging.getLogger(__name__)

RUN_CONFIG_KEY = pytest.StashKey[RunConfig]()


def _safe_name(s: str) -> str:
    s = re.sub(r"[^a-zA-Z0-9_.-]+", "_", s or "")
    s = s.strip("_")
    return s[:120] if s else "scenario"


def _scenario_of(request):
    callspec = getattr(request.node, "callspec", None)
    return callspec.params.get("sc") if callspec else None


def pytest_configure(config):
    load_dotenv()
    config.stash[RUN_CONFIG_KEY] = load_run_config()


def pytest_collection_modifyitems(config, items):
    cfg = config.stash[RUN_CONFIG_KEY]

    try:
        selected, deselected = apply_only_policy(items, forbid_only=cfg.forbid_only)
    except ForbiddenOnlyError as e:
        raise pytest.UsageError(str(e)) from e
    if deselected:
        config.hook.pytest_deselected(items=deselected)
        items[:] = selected

    # whole-scenario retries (pytest-rerunfailures)
    if cfg.retries > 0:
        for item in items:
            if item.get_closest_marker("e2e") is not None and item.get_closest_marker("flaky") is None:
                item.add_marker(pytest.mark.flaky(reruns=cfg.retries))


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    outcome = yield
    rep = outcome.get_result()
    setattr(item, f"rep_{rep.when}", rep)


@pytest.fixture(scope="session")
def run_config(pytestconfig) -> RunConfig:
    return pytestconfig.stash[RUN_CONFIG_KEY]


@pytest.fixture(scope="session")
def pw():
    with sync_playwright() as p:
        yield p


@pytest.fixture(scope="session")
def browser(pw, run_config):
    """One browser per worker process."""
    try:
        b = launch_browser(pw, run_config)
    except PlaywrightError as e:
        reason = f"browser could not be launched ({run_config.project.name}): {e}"
        # a CI run without a working browser must not pass as all-skipped
        if run_config.is_ci:
            pytest.fail(reason)
        pytest.skip(reason)

    yield b

    b.close()


@pytest.fixture(scope="session")
def artifacts_base_dir(run_config):
    base = run_config.artifact_dir
    base.mkdir(parents=True, exist_ok=True)
    return base


@pytest.fixture()
def context(request, pw, browser, run_config):
    """
    Fresh context per scenario; mobile scenarios get the phone viewport here.
    Closed on teardown so no session is left behind.
    """
    sc = _scenario_of(request)
    viewport = getattr(sc, "viewport", "desktop")
    ctx = new_context(browser, run_config, **scenario_context_kwargs(pw, run_config, viewport))

    yield ctx

    ctx.close()


@pytest.fixture()
def artifacts(request, artifacts_base_dir, run_config):
    sc = _scenario_of(request)
    return Artifacts(
        base_dir=artifacts_base_dir,
        scenario_id=_safe_name(getattr(sc, "id", None) or request.node.name),
        screenshot=run_config.screenshot,
    )


@pytest.fixture()
def page(request, context, artifacts, run_config):
    p = context.new_page()

    yield p

    # failures that escaped the flow (exceptions) still get a screenshot
    rep = getattr(request.node, "rep_call", None)
    if rep is not None and rep.failed and not artifacts.failures and run_config.screenshot != "off":
        artifacts.save_debug(p, "failure")
    p.close()


@pytest.fixture()
def tracing_stop(request, context, artifacts, run_config):
    """
    Starts tracing when the trace mode asks for it on this attempt and
    hands back stop(path, failed). Safe to call more than once.
    """
    attempt = getattr(request.node, "execution_count", 1)
    state = {"recording": False}

    if should_record(run_config.trace, attempt):
        context.tracing.start(screenshots=True, snapshots=True, sources=True)
        state["recording"] = True

    def _stop(path=None, failed=False):
        if not state["recording"]:
            return
        state["recording"] = False
        if path is not None and should_keep(run_config.trace, failed):
            ts = datetime.now().strftime("%Y%m%d_%H%M%S")
            out = path.with_name(f"trace_attempt{attempt}_{ts}.zip")
            context.tracing.stop(path=str(out))
            logger.info("trace saved: %s", out)
        else:
            context.tracing.stop()

    yield _stop

    rep = getattr(request.node, "rep_call", None)
    _stop(artifacts.path("trace.zip"), failed=bool(rep is not None and rep.failed))
