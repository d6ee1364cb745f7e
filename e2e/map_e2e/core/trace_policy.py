from .types import TraceMode


def should_record(mode: TraceMode, attempt: int) -> bool:
    """attempt is 1 for the first run, 2 for the first retry, ..."""
    if mode == "on-first-retry":
        return attempt == 2
    return mode in ("on", "retain-on-failure")


def should_keep(mode: TraceMode, failed: bool) -> bool:
    if mode == "retain-on-failure":
        return failed
    return mode != "off"
