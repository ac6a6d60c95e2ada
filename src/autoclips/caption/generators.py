import os
import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Sequence

from autoclips.config import CaptionConfig
from autoclips.caption.window import ClipCue, extract_caption_window
from autoclips.models.transcript import Cue
from autoclips.utils.system import format_timestamp, format_ass_timestamp

logger = logging.getLogger(__name__)


class CaptionFormat(str, Enum):
    SRT = "srt"
    ASS = "ass"


class CaptionStyle(str, Enum):
    STANDARD = "standard"
    WORD_BY_WORD = "word_by_word"
    KARAOKE = "karaoke"


@dataclass(frozen=True)
class CaptionRequest:
    """Output format requested for a clip's captions."""
    format: CaptionFormat = CaptionFormat.SRT
    style: CaptionStyle = CaptionStyle.STANDARD

    @property
    def extension(self) -> str:
        return f".{self.format.value}"

    @classmethod
    def from_config(cls, cfg: CaptionConfig) -> "CaptionRequest":
        return cls(format=CaptionFormat(cfg.format), style=CaptionStyle(cfg.style))


# Word-by-word markup: current word highlighted, upcoming words dimmed
CURRENT_WORD_OPEN = "{\\c&H00FFFF&\\b1}"
CURRENT_WORD_CLOSE = "{\\c&HFFFFFF&\\b1}"
UPCOMING_WORD_OPEN = "{\\alpha&H80&}"
UPCOMING_WORD_CLOSE = "{\\alpha&H00&}"


def render_srt(cues: Sequence[ClipCue]) -> str:
    """Line form: index, ``HH:MM:SS,mmm --> HH:MM:SS,mmm``, text, blank line."""
    blocks = [
        f"{cue.index}\n{format_timestamp(cue.start_s)} --> {format_timestamp(cue.end_s)}\n{cue.text.strip()}"
        for cue in cues
    ]
    if not blocks:
        return ""
    return "\n\n".join(blocks) + "\n"


def generate_ass_header(cfg: CaptionConfig) -> str:
    """Generate ASS file header with styles for animated captions."""
    font_name, font_size = cfg.font_name, cfg.font_size
    prim, high = cfg.primary_color, cfg.highlight_color
    out, back = cfg.outline_color, cfg.back_color
    out_w, shad = cfg.outline_width, cfg.shadow_depth
    margin_v = cfg.margin_v

    return f"""[Script Info]
Title: {cfg.title}
ScriptType: v4.00+
PlayResX: {cfg.play_res_x}
PlayResY: {cfg.play_res_y}
WrapStyle: 0

[V4+ Styles]
Format: Name, Fontname, Fontsize, PrimaryColour, SecondaryColour, OutlineColour, BackColour, Bold, Italic, Underline, StrikeOut, ScaleX, ScaleY, Spacing, Angle, BorderStyle, Outline, Shadow, Alignment, MarginL, MarginR, MarginV, Encoding
Style: Default,{font_name},{font_size},{prim},{high},{out},{back},1,0,0,0,100,100,0,0,1,{out_w},{shad},2,10,10,{margin_v},1
Style: Highlight,{font_name},{font_size},{high},{prim},{out},{back},1,0,0,0,100,100,0,0,1,{out_w},{shad},2,10,10,{margin_v},1

[Events]
Format: Layer, Start, End, Style, Name, MarginL, MarginR, MarginV, Effect, Text
"""


def format_dialogue(start: float, end: float, text: str, style: str = "Default", layer: int = 0) -> str:
    """One ASS event: Layer,Start,End,Style,Name,MarginL,MarginR,MarginV,Effect,Text."""
    return f"Dialogue: {layer},{format_ass_timestamp(start)},{format_ass_timestamp(end)},{style},,0,0,0,,{text}\n"


def _ass_text(text: str) -> str:
    return text.strip().replace("\r\n", "\n").replace("\n", "\\N")


def karaoke_text(cue: ClipCue) -> str:
    """Progressive highlight markup: ``{\\kfD}word`` with D in centiseconds."""
    parts = []
    for w in cue.words:
        duration_cs = int(round((w.end_s - w.start_s) * 100))
        parts.append(f"{{\\kf{duration_cs}}}{w.word}")
    return " ".join(parts)


def word_by_word_events(cue: ClipCue) -> List[str]:
    """
    One event per word, showing the whole line with the current word highlighted.

    Events are clamped to the cue; words that fall outside a truncated cue
    get no event.
    """
    events = []
    words = cue.words
    for idx, current in enumerate(words):
        start = max(current.start_s, cue.start_s)
        end = min(current.end_s, cue.end_s)
        if end <= start:
            continue
        parts = []
        for i, w in enumerate(words):
            if i == idx:
                parts.append(f"{CURRENT_WORD_OPEN}{w.word}{CURRENT_WORD_CLOSE}")
            elif i < idx:
                parts.append(w.word)
            else:
                parts.append(f"{UPCOMING_WORD_OPEN}{w.word}{UPCOMING_WORD_CLOSE}")
        events.append(format_dialogue(start, end, " ".join(parts)))
    return events


def render_ass(cues: Sequence[ClipCue], style: CaptionStyle, cfg: CaptionConfig) -> str:
    """Styled form: header plus one event per cue (or per word for word_by_word)."""
    content = generate_ass_header(cfg)
    for cue in cues:
        if style == CaptionStyle.KARAOKE and cue.words:
            content += format_dialogue(cue.start_s, cue.end_s, karaoke_text(cue))
        elif style == CaptionStyle.WORD_BY_WORD and cue.words:
            content += "".join(word_by_word_events(cue))
        else:
            content += format_dialogue(cue.start_s, cue.end_s, _ass_text(cue.text))
    return content


def render_captions(cues: Sequence[ClipCue], request: CaptionRequest, cfg: CaptionConfig) -> str:
    """Serialize clip cues in the requested format."""
    if request.format == CaptionFormat.ASS:
        return render_ass(cues, request.style, cfg)
    # SRT has no markup for highlights: word styles render one entry per cue
    return render_srt(cues)


def write_clip_captions(
    cues: Sequence[Cue],
    clip_start: float,
    clip_end: float,
    output_path: str,
    request: CaptionRequest,
    cfg: CaptionConfig,
) -> str:
    """
    Create the caption file for one clip, with timestamps relative to ``clip_start``.

    The file extension always follows ``request.format``; any extension on
    ``output_path`` is replaced.

    Returns:
        Path of the written caption file
    """
    clip_cues = extract_caption_window(cues, clip_start, clip_end)
    content = render_captions(clip_cues, request, cfg)

    root, _ = os.path.splitext(output_path)
    path = root + request.extension
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(content)

    logger.debug(f"Wrote {len(clip_cues)} cues to '{path}'")
    return path
