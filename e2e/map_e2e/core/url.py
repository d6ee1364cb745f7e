# e2e/map_e2e/core/url.py
from __future__ import annotations


def is_root_relative(href: str | None) -> bool:
    """'/pool-beach' -> True; 'https://...', ' /x' or '' -> False"""
    return (href or "").startswith("/")
