"""Pure time and size formatting helpers used by the CLI and the exporters."""
from __future__ import annotations

import math


def format_seconds(seconds: float) -> str:
    """Format a duration in seconds as ``HH:MM:SS.mmm``.

    Keeps the sign for negative values, rounds milliseconds to 3 digits.
    """
    sign = '-' if seconds < 0 else ''
    total_ms = int(round(abs(seconds) * 1000))
    hours, rest = divmod(total_ms, 3600 * 1000)
    minutes, rest = divmod(rest, 60 * 1000)
    secs, millis = divmod(rest, 1000)
    return f"{sign}{hours:02d}:{minutes:02d}:{secs:02d}.{millis:03d}"


def format_file_size(num_bytes: int) -> str:
    """Human readable size: ``0 Bytes``, ``1.5 KB``, ``2.25 MB``..."""
    if num_bytes <= 0:
        return "0 Bytes"
    units = ["Bytes", "KB", "MB", "GB"]
    i = min(int(math.floor(math.log(num_bytes, 1024))), len(units) - 1)
    value = round(num_bytes / math.pow(1024, i), 2)
    return f"{value:g} {units[i]}"
