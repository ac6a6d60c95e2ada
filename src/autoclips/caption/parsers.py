"""Parsers that turn existing caption files into a global cue list.

Malformed blocks are skipped with a warning; a file with nothing usable
yields an empty list.
"""
from __future__ import annotations
import logging
import re
from typing import List

from autoclips.models.transcript import Cue
from autoclips.utils.system import parse_timestamp, parse_ass_timestamp

logger = logging.getLogger(__name__)

SRT_TIMING_RE = re.compile(r"(\d{2}:\d{2}:\d{2}[,.]\d{3})\s*-->\s*(\d{2}:\d{2}:\d{2}[,.]\d{3})")
ASS_DIALOGUE_RE = re.compile(
    r"^Dialogue:\s*(\d+),([^,]+),([^,]+),([^,]*),([^,]*),([^,]*),([^,]*),([^,]*),([^,]*),(.*)$"
)


def parse_srt(content: str) -> List[Cue]:
    """Parse SubRip text into cues."""
    cues = []
    blocks = re.split(r"\n\s*\n", content.replace("\r\n", "\n").strip())
    for block in blocks:
        lines = block.split("\n")
        if len(lines) < 3:
            continue
        match = SRT_TIMING_RE.search(lines[1])
        if not match:
            logger.warning(f"Skipping SRT block without a timing line: {lines[0]!r}")
            continue
        start = parse_timestamp(match.group(1))
        end = parse_timestamp(match.group(2))
        cues.append(Cue(start_s=start, end_s=end, text="\n".join(lines[2:])))
    cues.sort(key=lambda c: c.start_s)
    return cues


def parse_ass(content: str) -> List[Cue]:
    """Parse ASS ``Dialogue`` events into cues; override markup stays in the text."""
    cues = []
    in_events = False
    for line in content.replace("\r\n", "\n").split("\n"):
        if line.startswith("[Events]"):
            in_events = True
            continue
        if not in_events or not line.startswith("Dialogue:"):
            continue
        match = ASS_DIALOGUE_RE.match(line)
        if not match:
            logger.warning(f"Skipping malformed ASS event: {line[:60]!r}")
            continue
        try:
            start = parse_ass_timestamp(match.group(2))
            end = parse_ass_timestamp(match.group(3))
        except ValueError:
            logger.warning(f"Skipping ASS event with bad timestamps: {line[:60]!r}")
            continue
        cues.append(Cue(start_s=start, end_s=end, text=match.group(10).replace("\\N", "\n")))
    cues.sort(key=lambda c: c.start_s)
    return cues


def load_caption_file(path: str, caption_format: str) -> List[Cue]:
    """Load a caption file; ``caption_format`` is ``"srt"`` or ``"ass"``."""
    with open(path, "r", encoding="utf-8") as f:
        content = f.read()
    if caption_format == "ass":
        return parse_ass(content)
    return parse_srt(content)
