"""
LLM judges that pick clip candidates out of a transcript window.

A judge is called once per analysis window with the window's plain text
and its cues, and returns candidate segments on the source timeline. The
chunk coordinator owns concurrency and timeouts; judges raise
``ExternalJudgeError`` on any failure so it can record the window as lost.
"""
from __future__ import annotations
import os
import re
import json
import math
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

from autoclips.config import JudgeConfig, CuriosityConfig
from autoclips.exceptions import ExternalJudgeError, InputError
from autoclips.candidates.models import CandidateSegment, JudgedSegment, ScoredSegment
from autoclips.models.transcript import Cue

logger = logging.getLogger(__name__)

CATEGORY_NAMES = {
    "curiosidades": "Curiosities",
    "historia": "History",
    "filmes": "Movies/Series",
    "misterios": "Mysteries",
}

PRIORITY_INSTRUCTIONS = {
    "completeness": "Prioritize COMPLETENESS: stories with a clear beginning, middle and end",
    "viral": "Prioritize VIRALITY: the most shocking and surprising information",
    "balanced": "Balance COMPLETENESS and VIRALITY: complete stories that also hit hard",
}

VIRAL_SYSTEM_PROMPT = (
    "You are an expert in viral content for TikTok and Reels. "
    "Answer ONLY with valid JSON, no markdown or explanations."
)

CURIOSITY_SYSTEM_PROMPT = (
    "You are an expert at finding complete, self-contained curiosities in videos. "
    "Answer ONLY with valid JSON, no markdown or explanations."
)

VIRAL_PROMPT = """You are an expert at spotting viral content for TikTok/Reels.

# MISSION
Find the {max_clips} MOST VIRAL moments in this transcript for an audience aged 16-35.

# CATEGORIES: {categories}

# TRANSCRIPT
{transcript}

# SEGMENTS [start, end, "text"]
{segments}

# SELECTION CRITERIA
INCLUDE:
- Reveals something 95%+ of people do not know
- Contradicts a popular belief
- Mystery, death or conspiracy
- Shocking statistics
- Strong hook in the first 2s

EXCLUDE:
- Intros and goodbyes
- Obvious information
- Needs earlier context

# DURATION: {min_duration}-{max_duration}s (ideal: {clip_duration}s)

# ANSWER ONLY WITH JSON:
{{
  "clips_found": N,
  "clips": [{{
    "title": "Title, max 60 chars",
    "description": "2-3 sentences",
    "start_time": 123.45,
    "end_time": 183.45,
    "duration": 60,
    "viral_score": 8,
    "category": "misterios",
    "hook_suggestion": "2s hook",
    "why_viral": "Short reason",
    "caption_suggestion": "Post caption with emojis and hashtags",
    "hashtags": ["#viral"],
    "estimated_views": "10k-50k",
    "confidence_level": "high"
  }}],
  "warnings": []
}}

SCORE: 10=guaranteed viral, 8-9=high potential, 6-7=good, <6=do not include
Sort by viral_score (highest first). At most {max_clips} clips."""

CURIOSITY_PROMPT = """You are an expert at finding COMPLETE CURIOSITIES in videos for TikTok/Reels.

# MISSION
Find the {max_blocks} BEST blocks of COMPLETE curiosities/stories in this transcript.
IMPORTANT: each block must tell a story FROM START TO FINISH.
DO NOT cut in the middle of an explanation.

# TRANSCRIPT
{transcript}

# SEGMENTS [start, end, "text"]
{segments}

# DURATION RULES
- Minimum: {min_duration}s (only for a very short but complete curiosity)
- Maximum: {max_duration}s (may be long if the story needs it)
- Ideal: {ideal_duration}s
- {priority_instruction}

# EVERY BLOCK MUST HAVE
1. HOOK (first 3s)
2. DEVELOPMENT: explanation, context, interesting details
3. CONCLUSION: satisfying ending, reveal or punchline

# COMPLETENESS (score 0-10)
10 = perfect story, 8-9 = very good, 6-7 = complete but weak, < 6 = DO NOT INCLUDE

# ANSWER ONLY WITH JSON:
{{
  "blocks_found": N,
  "blocks": [{{
    "title": "Curiosity title (max 60 chars)",
    "description": "2-3 sentence summary",
    "start_time": 45.2,
    "end_time": 138.7,
    "duration": 93.5,
    "completeness_score": 9,
    "viral_score": 8,
    "has_hook": true,
    "has_development": true,
    "has_conclusion": true,
    "hook_text": "Hook text",
    "conclusion_text": "Conclusion text",
    "category": "curiosidades",
    "caption_suggestion": "Post caption with emojis and hashtags",
    "hashtags": ["#curiosities"],
    "confidence_level": "high"
  }}],
  "warnings": []
}}

Sort by (completeness_score x 0.6 + viral_score x 0.4), highest first.
At most {max_blocks} blocks."""

VIRAL_METADATA_KEYS = (
    "title", "description", "category", "hook_suggestion", "why_viral",
    "caption_suggestion", "hashtags", "estimated_views", "confidence_level",
)

CURIOSITY_METADATA_KEYS = (
    "title", "description", "category", "hook_text", "conclusion_text",
    "why_complete", "why_viral", "caption_suggestion", "hashtags",
    "estimated_views", "confidence_level",
)


def detect_llm_availability() -> bool:
    return bool(os.getenv("OPENAI_API_KEY"))


def compact_cues(cues: Sequence[Cue]) -> List[list]:
    """Token-light cue form: ``[start, end, "text"]`` with 2-decimal times."""
    return [[round(c.start_s, 2), round(c.end_s, 2), c.text.strip()] for c in cues]


def truncate_transcription(text: str, max_chars: int = 15000) -> str:
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + "... [TRUNCATED]"


def strip_code_fences(content: str) -> str:
    if "```json" in content:
        content = re.sub(r"```json\n?", "", content)
    if "```" in content:
        content = re.sub(r"```\n?", "", content)
    return content.strip()


def parse_json_response(content: Optional[str]) -> Dict[str, Any]:
    """Decode a JSON-only model answer, tolerating markdown fences."""
    if not content:
        raise ExternalJudgeError("Empty response from judge")
    try:
        data = json.loads(strip_code_fences(content))
    except json.JSONDecodeError as e:
        raise ExternalJudgeError(f"Judge returned invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ExternalJudgeError("Judge response is not a JSON object")
    return data


def build_viral_prompt(
    window_text: str,
    window_cues: Sequence[Cue],
    categories: List[str],
    clip_duration: float,
    max_clips: int,
    max_chars: int = 15000,
) -> str:
    return VIRAL_PROMPT.format(
        max_clips=max_clips,
        categories=", ".join(CATEGORY_NAMES.get(c, c) for c in categories),
        transcript=truncate_transcription(window_text, max_chars),
        segments=json.dumps(compact_cues(window_cues), ensure_ascii=False),
        min_duration=int(max(30, clip_duration - 15)),
        max_duration=int(clip_duration + 15),
        clip_duration=int(clip_duration),
    )


def build_curiosity_prompt(
    window_text: str,
    window_cues: Sequence[Cue],
    cfg: CuriosityConfig,
    max_blocks: int,
) -> str:
    return CURIOSITY_PROMPT.format(
        max_blocks=max_blocks,
        transcript=truncate_transcription(window_text, cfg.max_transcript_chars),
        segments=json.dumps(compact_cues(window_cues), ensure_ascii=False),
        min_duration=int(cfg.min_duration_s),
        max_duration=int(cfg.max_duration_s),
        ideal_duration=int(cfg.ideal_duration_s),
        priority_instruction=PRIORITY_INSTRUCTIONS.get(cfg.priority, PRIORITY_INSTRUCTIONS["balanced"]),
    )


class ClipJudge(ABC):
    """Abstract interface for window judges."""

    def __init__(self, max_count: int = 8):
        self.max_count = max_count

    @abstractmethod
    def __call__(self, window_text: str, window_cues: Sequence[Cue]) -> List[CandidateSegment]:
        """Return candidate segments found in one window."""


class OpenAIJudge(ClipJudge):
    """Shared chat-completions plumbing for the OpenAI judges."""

    def __init__(self, cfg: JudgeConfig, max_count: int = 8, client: Any = None):
        super().__init__(max_count)
        self.cfg = cfg
        self._client = client

    @property
    def client(self):
        if self._client is None:
            from openai import OpenAI
            self._client = OpenAI(timeout=self.cfg.request_timeout_s)
        return self._client

    def complete(self, system_prompt: str, user_prompt: str) -> str:
        params = {
            "model": self.cfg.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
        }
        # reasoning models reject temperature and use a different token cap
        if self.cfg.model.startswith("o"):
            params["max_completion_tokens"] = max(self.cfg.max_tokens, 25000)
        else:
            params.update({"max_tokens": self.cfg.max_tokens, "temperature": self.cfg.temperature})

        try:
            response = self.client.chat.completions.create(**params)
        except Exception as e:
            raise ExternalJudgeError(f"OpenAI request failed: {e}") from e
        return response.choices[0].message.content


class OpenAIViralJudge(OpenAIJudge):
    """Finds the most viral moments of a window, scored 0-10."""

    def __call__(self, window_text: str, window_cues: Sequence[Cue]) -> List[CandidateSegment]:
        prompt = build_viral_prompt(
            window_text,
            window_cues,
            self.cfg.categories,
            self.cfg.clip_duration_s,
            self.max_count,
            self.cfg.max_transcript_chars,
        )
        data = parse_json_response(self.complete(VIRAL_SYSTEM_PROMPT, prompt))
        for warning in data.get("warnings") or []:
            logger.info(f"Judge warning: {warning}")

        candidates = []
        for clip in data.get("clips") or []:
            try:
                viral_score = float(clip.get("viral_score", 0))
                segment = ScoredSegment(
                    start_s=float(clip["start_time"]),
                    end_s=float(clip["end_time"]),
                    score=viral_score,
                    metadata={k: clip[k] for k in VIRAL_METADATA_KEYS if k in clip},
                )
            except (KeyError, TypeError, ValueError, InputError) as e:
                logger.warning(f"Skipping malformed clip from judge: {e}")
                continue
            if viral_score < self.cfg.min_score:
                continue
            candidates.append(segment)

        logger.debug(f"Viral judge kept {len(candidates)} clips")
        return candidates


class OpenAICuriosityJudge(OpenAIJudge):
    """Finds complete, self-contained story blocks."""

    def __init__(
        self,
        cfg: JudgeConfig,
        curiosity: CuriosityConfig,
        max_count: Optional[int] = None,
        client: Any = None,
    ):
        super().__init__(cfg, max_count if max_count is not None else curiosity.max_blocks, client)
        self.curiosity = curiosity

    def block_budget(self, window_cues: Sequence[Cue]) -> int:
        """Short windows cannot hold many minimum-length blocks."""
        if not window_cues:
            return 0
        span = window_cues[-1].end_s - window_cues[0].start_s
        estimated = math.floor(span / self.curiosity.min_duration_s)
        return max(1, min(self.max_count, estimated))

    def __call__(self, window_text: str, window_cues: Sequence[Cue]) -> List[CandidateSegment]:
        max_blocks = self.block_budget(window_cues)
        if max_blocks == 0:
            return []
        logger.info(
            f"Requesting up to {max_blocks} blocks "
            f"({self.curiosity.min_duration_s:.0f}s-{self.curiosity.max_duration_s:.0f}s)"
        )
        prompt = build_curiosity_prompt(window_text, window_cues, self.curiosity, max_blocks)
        data = parse_json_response(self.complete(CURIOSITY_SYSTEM_PROMPT, prompt))

        blocks = []
        dropped = 0
        for block in data.get("blocks") or []:
            try:
                completeness = float(block.get("completeness_score", 0))
                viral = float(block.get("viral_score", 0))
                segment = JudgedSegment(
                    start_s=float(block["start_time"]),
                    end_s=float(block["end_time"]),
                    score=JudgedSegment.rank_score(completeness, viral),
                    metadata={k: block[k] for k in CURIOSITY_METADATA_KEYS if k in block},
                    completeness_score=completeness,
                    viral_score=viral,
                    has_hook=bool(block.get("has_hook", False)),
                    has_development=bool(block.get("has_development", False)),
                    has_conclusion=bool(block.get("has_conclusion", False)),
                )
            except (KeyError, TypeError, ValueError, InputError) as e:
                logger.warning(f"Skipping malformed block from judge: {e}")
                continue
            if completeness < self.curiosity.min_completeness_score:
                dropped += 1
                continue
            if segment.duration_s < self.curiosity.min_duration_s:
                logger.warning(
                    f"Block '{segment.title}' lasts {segment.duration_s:.1f}s < {self.curiosity.min_duration_s:.0f}s"
                )
            if segment.duration_s > self.curiosity.max_duration_s:
                logger.warning(
                    f"Block '{segment.title}' lasts {segment.duration_s:.1f}s > {self.curiosity.max_duration_s:.0f}s"
                )
            blocks.append(segment)

        if dropped:
            logger.info(
                f"{dropped} blocks filtered by completeness_score < {self.curiosity.min_completeness_score:.0f}"
            )
        logger.info(f"{len(blocks)} complete blocks found")
        return blocks
