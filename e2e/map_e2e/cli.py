"""
map-e2e: run the map page scenarios with the settings from config/run.yaml.

    map-e2e                      # local policy: no retries, one worker per CPU
    map-e2e --ci                 # CI policy: 1 retry, 1 worker, only-marks rejected
    map-e2e --print-config
    map-e2e -- -k performance    # anything after -- goes to pytest as-is
"""
from __future__ import annotations

import argparse
import dataclasses
import logging
import os
import sys
from typing import List, Optional, Sequence

import pytest
import yaml
from dotenv import load_dotenv

from map_e2e.core.config_loader import load_run_config, run_config_to_dict
from map_e2e.core.types import RunConfig

logger = logging.getLogger(__name__)


def build_pytest_args(cfg: RunConfig, extra: Sequence[str] = ()) -> List[str]:
    args: List[str] = [cfg.test_dir]

    # pytest-xdist; a single worker runs in-process
    if cfg.workers != 1:
        args += ["-n", "auto" if cfg.workers is None else str(cfg.workers)]
        args += ["--dist", "load" if cfg.fully_parallel else "loadfile"]

    # pytest-html; the report is written, never opened
    if cfg.reporter == "html":
        args += [f"--html={cfg.report_path}", "--self-contained-html"]

    args += list(extra)
    return args


def _parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="map-e2e", description="Run the /map page E2E scenarios.")
    ap.add_argument("--config", help="run.yaml path (default: e2e/config/run.yaml or $RUN_CONFIG)")
    ap.add_argument("--ci", action="store_true", help="apply the CI policy (same as CI=1)")
    ap.add_argument("--base-url", help="override base_url ($E2E_BASE_URL)")
    mode = ap.add_mutually_exclusive_group()
    mode.add_argument("--headed", action="store_true", help="show the browser window")
    mode.add_argument("--headless", action="store_true", help="hide the browser window")
    ap.add_argument("--workers", type=int, help="override the worker count")
    ap.add_argument("--print-config", action="store_true", help="print the resolved config and exit")
    ap.add_argument("pytest_args", nargs=argparse.REMAINDER, help="extra pytest arguments after --")
    return ap


def main(argv: Optional[Sequence[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    load_dotenv()

    ns = _parser().parse_args(argv)

    # conftest reads the same env, so overrides are passed through it
    if ns.ci:
        os.environ["CI"] = "1"
    if ns.base_url:
        os.environ["E2E_BASE_URL"] = ns.base_url
    if ns.headed:
        os.environ["PW_HEADLESS"] = "0"
    if ns.headless:
        os.environ["PW_HEADLESS"] = "1"
    if ns.config:
        os.environ["RUN_CONFIG"] = ns.config

    cfg = load_run_config()
    if ns.workers is not None:
        if ns.workers < 1:
            logger.error("--workers must be >= 1")
            return 2
        cfg = dataclasses.replace(cfg, workers=ns.workers)

    if ns.print_config:
        sys.stdout.write(yaml.safe_dump(run_config_to_dict(cfg), sort_keys=False))
        return 0

    extra = [a for a in ns.pytest_args if a != "--"]
    args = build_pytest_args(cfg, extra)
    logger.info("pytest %s", " ".join(args))
    return int(pytest.main(args))


if __name__ == "__main__":
    sys.exit(main())
