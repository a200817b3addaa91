"""Display formatting for timers and durations."""

from __future__ import annotations


def format_timer_text(remaining_seconds: float) -> str:
    """Countdown text: whole minutes and seconds, e.g. 90.4 -> '01:30'."""
    total = max(0, int(remaining_seconds))
    return f"{total // 60:02d}:{total % 60:02d}"


def format_duration(seconds: int) -> str:
    """Short duration label: '1m 30s', '2m', '45s', or '' for nothing."""
    if seconds <= 0:
        return ""
    minutes, secs = divmod(int(seconds), 60)
    if minutes >= 1:
        return f"{minutes}m {secs}s" if secs > 0 else f"{minutes}m"
    return f"{secs}s"
