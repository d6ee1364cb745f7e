from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

from playwright.sync_api import Page, Error as PlaywrightError

from .types import ScreenshotMode

logger = logging.getLogger(__name__)


@dataclass
class Artifacts:
    base_dir: Path
    scenario_id: str
    screenshot: ScreenshotMode = "only-on-failure"
    failures: List[str] = field(default_factory=list)

    @property
    def out_dir(self) -> Path:
        d = self.base_dir / self.scenario_id
        d.mkdir(parents=True, exist_ok=True)
        return d

    def path(self, filename: str) -> Path:
        return self.out_dir / filename

    def save_debug(self, page: Page, prefix: str) -> None:
        """Called on a failed step: records the tag, then PNG + HTML unless screenshots are off."""
        self.failures.append(prefix)
        if self.screenshot == "off":
            return
        self._dump(page, prefix)

    def save_last(self, page: Page) -> None:
        if self.screenshot == "on":
            self._dump(page, "last")

    def write_json(self, filename: str, data: Dict[str, Any]) -> Path:
        p = self.path(filename)
        p.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
        return p

    def _dump(self, page: Page, prefix: str) -> None:
        # the page may already be closed or crashed; a missing dump must not hide the real failure
        try:
            page.screenshot(path=str(self.path(f"{prefix}.png")), full_page=True)
        except PlaywrightError as e:
            logger.debug("screenshot %s/%s skipped: %s", self.scenario_id, prefix, e)
        try:
            html = page.content()
            self.path(f"{prefix}.html").write_text(html, encoding="utf-8")
        except PlaywrightError as e:
            logger.debug("html dump %s/%s skipped: %s", self.scenario_id, prefix, e)
