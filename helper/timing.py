def format_elapsed(start_ms: int, end_ms: int) -> str:
    """Seconds between two millisecond timestamps, e.g. (0, 2000) -> '2.00s'."""
    elapsed = max(0, end_ms - start_ms) / 1000
    return f"{elapsed:.2f}s"
