from __future__ import annotations

from typing import Any, Dict, Optional

from playwright.sync_api import Browser, BrowserContext, Playwright

from map_e2e.selectors import map_selectors as S

from .types import BrowserProject, RunConfig


def launch_kwargs(project: BrowserProject, slow_mo_ms: int = 0) -> Dict[str, Any]:
    kwargs: Dict[str, Any] = {"headless": project.headless, "slow_mo": slow_mo_ms}
    if project.channel:
        kwargs["channel"] = project.channel
    if project.args:
        kwargs["args"] = list(project.args)
    return kwargs


def device_options(pw: Playwright, project: BrowserProject) -> Dict[str, Any]:
    """Playwright device descriptor (viewport, user agent, scale) minus the engine hint."""
    if not project.device:
        return {}
    desc = dict(pw.devices[project.device])
    desc.pop("default_browser_type", None)
    return desc


def context_kwargs(
    cfg: RunConfig,
    device: Optional[Dict[str, Any]] = None,
    **overrides: Any,
) -> Dict[str, Any]:
    kwargs: Dict[str, Any] = dict(device or {})
    kwargs["base_url"] = cfg.base_url
    kwargs.update(overrides)
    return kwargs


def launch_browser(pw: Playwright, cfg: RunConfig) -> Browser:
    project = cfg.project
    browser_type = getattr(pw, project.browser)
    return browser_type.launch(**launch_kwargs(project, cfg.slow_mo_ms))


def new_context(browser: Browser, cfg: RunConfig, **kwargs: Any) -> BrowserContext:
    """
    Every scenario gets its own context; timeouts are unified here.
    Callers that create one must close it.
    """
    context = browser.new_context(**kwargs)
    context.set_default_timeout(cfg.timeout_ms)
    context.set_default_navigation_timeout(cfg.nav_timeout_ms)
    return context


def scenario_context_kwargs(pw: Playwright, cfg: RunConfig, viewport: str = "desktop") -> Dict[str, Any]:
    # mobile scenarios replace the desktop device with a phone-sized viewport and UA
    if viewport == "mobile":
        return context_kwargs(
            cfg,
            viewport=dict(S.MOBILE_VIEWPORT),
            user_agent=S.MOBILE_USER_AGENT,
        )
    return context_kwargs(cfg, device_options(pw, cfg.project))
