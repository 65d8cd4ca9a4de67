"""Time and format utilities — seconds <-> timecodes, clamping, durations.

Timecodes are MM:SS.mmm, or HH:MM:SS.mmm once the value reaches an hour
(or when show_hours is set). Seconds are rounded to the nearest
millisecond before being split into fields, so a parse of the formatted
string recovers the input within half a millisecond.
"""


def clamp(value: float, low: float, high: float) -> float:
    """Clamp value into [low, high]."""
    return min(max(value, low), high)


def clamp_time(time: float, video_duration: float) -> float:
    """Clamp a time into the bounds of the source video."""
    return clamp(time, 0.0, video_duration)


def seconds_to_timecode(seconds: float, show_hours: bool = False) -> str:
    """Format seconds as MM:SS.mmm (or HH:MM:SS.mmm).

    Negative input is treated as zero.
    """
    total_ms = max(0, round(seconds * 1000))
    total_s, ms = divmod(total_ms, 1000)
    hours, rem = divmod(total_s, 3600)
    minutes, secs = divmod(rem, 60)

    if show_hours or hours > 0:
        return f"{hours:02d}:{minutes:02d}:{secs:02d}.{ms:03d}"
    return f"{minutes:02d}:{secs:02d}.{ms:03d}"


def timecode_to_seconds(timecode: str) -> float:
    """Parse HH:MM:SS.mmm, MM:SS.mmm or plain SS.mmm into seconds.

    Raises:
        ValueError: If the string has more than three fields or a field
            is not numeric.
    """
    parts = timecode.strip().split(":")
    if len(parts) == 3:
        return int(parts[0]) * 3600 + int(parts[1]) * 60 + float(parts[2])
    if len(parts) == 2:
        return int(parts[0]) * 60 + float(parts[1])
    if len(parts) == 1:
        return float(parts[0])
    raise ValueError(f"Invalid timecode: '{timecode}'")


def format_duration(seconds: float) -> str:
    """Human-readable duration: '42s', '3m 5s', '1h 12m'."""
    if seconds < 60:
        return f"{int(seconds)}s"
    if seconds < 3600:
        return f"{int(seconds // 60)}m {int(seconds % 60)}s"
    return f"{int(seconds // 3600)}h {int((seconds % 3600) // 60)}m"
