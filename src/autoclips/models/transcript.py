"""Transcript data models: the global cue list consumed by every stage."""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional
import json


@dataclass
class Word:
    """Single word with timestamps."""
    start_s: float
    end_s: float
    word: str

    def shifted(self, offset_s: float) -> "Word":
        return Word(start_s=self.start_s + offset_s, end_s=self.end_s + offset_s, word=self.word)


@dataclass
class Cue:
    """Timed caption entry, optionally with per-word sub-timings."""
    start_s: float
    end_s: float
    text: str
    words: List[Word] = field(default_factory=list)


@dataclass
class Transcript:
    """
    Complete transcript for one job.

    JSON schema:
    {
      "language": "pt",
      "duration_s": 3723.52,
      "cues": [{"start_s": 0.0, "end_s": 2.4, "text": "...", "words": [...]}]
    }

    Whisper ``verbose_json`` output (``segments`` with ``start``/``end``/``text``
    and an optional top-level ``words`` list) is accepted as well.
    """
    language: str = "unknown"
    duration_s: float = 0.0
    cues: List[Cue] = field(default_factory=list)
    words: List[Word] = field(default_factory=list)

    def __post_init__(self):
        self.cues = sorted(self.cues, key=lambda c: c.start_s)
        if not self.duration_s and self.cues:
            self.duration_s = max(c.end_s for c in self.cues)

    @classmethod
    def load(cls, path: str) -> "Transcript":
        """Load transcript from JSON file."""
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict) -> "Transcript":
        if "cues" in data:
            cues = [
                Cue(
                    start_s=float(c["start_s"]),
                    end_s=float(c["end_s"]),
                    text=c.get("text", ""),
                    words=[_parse_word(w) for w in c.get("words", [])],
                )
                for c in data["cues"]
            ]
        else:
            # Whisper verbose_json
            cues = [
                Cue(
                    start_s=float(s["start"]),
                    end_s=float(s["end"]),
                    text=s.get("text", "").strip(),
                    words=[_parse_word(w) for w in s.get("words", [])],
                )
                for s in data.get("segments", [])
            ]

        return cls(
            language=data.get("language", "unknown"),
            duration_s=float(data.get("duration_s", data.get("duration", 0.0)) or 0.0),
            cues=cues,
            words=[_parse_word(w) for w in data.get("words", [])],
        )

    def all_words(self) -> List[Word]:
        """Word timings, from the top-level list or gathered from the cues."""
        if self.words:
            return list(self.words)
        return [w for c in self.cues for w in c.words]


def _parse_word(w: dict) -> Word:
    return Word(
        start_s=float(w.get("start_s", w.get("start", 0.0))),
        end_s=float(w.get("end_s", w.get("end", 0.0))),
        word=str(w.get("word", w.get("text", ""))).strip(),
    )


def group_words_into_cues(words: List[Word], words_per_line: int = 4) -> List[Cue]:
    """Group a flat word list into caption cues of at most ``words_per_line`` words."""
    cues = []
    for i in range(0, len(words), words_per_line):
        line_words = words[i:i + words_per_line]
        if not line_words:
            continue
        cues.append(Cue(
            start_s=line_words[0].start_s,
            end_s=line_words[-1].end_s,
            text=" ".join(w.word for w in line_words),
            words=list(line_words),
        ))
    return cues


def caption_cues_for_style(transcript: Transcript, style: str, words_per_line: int = 4) -> List[Cue]:
    """
    Pick the global caption track for a caption style.

    Word-level styles need short word groups; when no word timings are
    available the sentence cues are used unchanged.
    """
    if style in ("word_by_word", "karaoke"):
        words = transcript.all_words()
        if words:
            return group_words_into_cues(words, words_per_line)
    return list(transcript.cues)


def join_cue_text(cues: List[Cue], limit: Optional[int] = None) -> str:
    text = " ".join(c.text.strip() for c in cues if c.text.strip())
    return text[:limit] if limit else text
