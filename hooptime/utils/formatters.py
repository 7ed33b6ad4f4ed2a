"""Display formatting helpers."""


def format_seconds(seconds: int) -> str:
    """
    Format seconds as M:SS.

    Example:
        >>> format_seconds(90)
        '1:30'
        >>> format_seconds(605)
        '10:05'
    """
    seconds = max(0, int(seconds))
    m = seconds // 60
    s = seconds % 60
    return f"{m}:{s:02d}"


def format_period_duration(minutes: int, seconds: int) -> str:
    return f"{minutes}:{seconds:02d}"


def format_player_name(name: str) -> str:
    """
    Shorten a full name to first initial plus the rest.

    Example:
        >>> format_player_name("Jane Q Public")
        'J. Q Public'
        >>> format_player_name("  ")
        '---'
    """
    trimmed = (name or "").strip()
    if not trimmed:
        return "---"
    parts = trimmed.split()
    if len(parts) < 2:
        return trimmed
    return f"{parts[0][0]}. {' '.join(parts[1:])}"


def period_label(period: int, period_type: str) -> str:
    """Long label for a period, e.g. ``Quarter 2`` or ``Half 1``."""
    if period_type == "Quarters":
        kind = "Quarter"
    elif period_type == "Halves":
        kind = "Half"
    else:
        kind = "Period"
    return f"{kind} {period}"


def period_short_label(period: int, period_type: str) -> str:
    prefix = "H" if period_type == "Halves" else "Q"
    return f"{prefix}{period}"
