"""Human-readable formatting helpers."""

from __future__ import annotations

_SIZE_UNITS = ("Bytes", "KB", "MB", "GB", "TB")


def format_file_size(num_bytes: int) -> str:
    """Format a byte count as ``"1.5 KB"`` style text (two decimals, trailing zeros trimmed)."""
    if num_bytes <= 0:
        return "0 Bytes"
    value = float(num_bytes)
    unit = 0
    while value >= 1024 and unit < len(_SIZE_UNITS) - 1:
        value /= 1024
        unit += 1
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {_SIZE_UNITS[unit]}"
