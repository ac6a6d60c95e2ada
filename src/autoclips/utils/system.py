import math


def format_timestamp(t: float) -> str:
    """Convert seconds to SRT timestamp format: HH:MM:SS,mmm"""
    if t < 0:
        t = 0
    # round away float noise before flooring to whole milliseconds
    total_ms = int(math.floor(round(t * 1000, 3)))
    hours = total_ms // 3_600_000
    minutes = (total_ms % 3_600_000) // 60_000
    seconds = (total_ms % 60_000) // 1000
    millis = total_ms % 1000
    return f"{hours:02}:{minutes:02}:{seconds:02},{millis:03}"


def parse_timestamp(ts: str) -> float:
    """Convert SRT timestamp (HH:MM:SS,mmm) to seconds."""
    ts = ts.strip()
    main, millis = ts.replace(".", ",").split(",")
    hours, minutes, seconds = [int(part) for part in main.split(":")]
    return hours * 3600 + minutes * 60 + seconds + int(millis) / 1000.0


def format_ass_timestamp(t: float) -> str:
    """Convert seconds to ASS timestamp format (H:MM:SS.cc)."""
    if t < 0:
        t = 0
    total_cs = int(math.floor(round(t * 100, 4)))
    hours = total_cs // 360_000
    minutes = (total_cs % 360_000) // 6000
    seconds = (total_cs % 6000) // 100
    centis = total_cs % 100
    return f"{hours}:{minutes:02d}:{seconds:02d}.{centis:02d}"


def parse_ass_timestamp(ts: str) -> float:
    """Convert ASS timestamp (H:MM:SS.cc) to seconds."""
    main, centis = ts.strip().split(".")
    hours, minutes, seconds = [int(part) for part in main.split(":")]
    return hours * 3600 + minutes * 60 + seconds + int(centis) / 100.0


def format_clock(seconds: float) -> str:
    """Readable MM:SS (or HH:MM:SS) for log lines."""
    h, m, s = int(seconds // 3600), int((seconds % 3600) // 60), int(seconds % 60)
    return f"{h:02d}:{m:02d}:{s:02d}" if h > 0 else f"{m:02d}:{s:02d}"
