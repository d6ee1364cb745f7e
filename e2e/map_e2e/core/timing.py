from __future__ import annotations

from typing import Any, Dict, List, Optional

from .types import NavigationTiming


def parse_navigation_timing(entry: Optional[Dict[str, Any]]) -> NavigationTiming:
    """Result of NAVIGATION_TIMING_JS -> NavigationTiming (ms, relative to navigation start)."""
    if not entry:
        raise ValueError("navigation timing entry is missing")
    missing = [k for k in ("domContentLoaded", "loadComplete", "ttfb") if entry.get(k) is None]
    if missing:
        raise ValueError(f"navigation timing entry lacks {missing}")
    return NavigationTiming(
        dom_content_loaded_ms=float(entry["domContentLoaded"]),
        load_complete_ms=float(entry["loadComplete"]),
        ttfb_ms=float(entry["ttfb"]),
    )


def threshold_violations(
    dom_load_ms: float,
    map_attach_ms: float,
    ttfb_ms: float,
    max_dom_load_ms: float = 8000,
    max_map_attach_ms: float = 15000,
    max_ttfb_ms: float = 2000,
) -> List[str]:
    """Empty list when every measurement is strictly below its upper bound."""
    out: List[str] = []
    if not dom_load_ms < max_dom_load_ms:
        out.append(f"dom_content_loaded {dom_load_ms:.0f}ms >= {max_dom_load_ms:.0f}ms")
    if not map_attach_ms < max_map_attach_ms:
        out.append(f"map_attach {map_attach_ms:.0f}ms >= {max_map_attach_ms:.0f}ms")
    if not ttfb_ms < max_ttfb_ms:
        out.append(f"ttfb {ttfb_ms:.0f}ms >= {max_ttfb_ms:.0f}ms")
    return out
