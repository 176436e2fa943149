"""
Quiz Generation Engine

Generates a self-test question set from document text using OpenAI GPT.
Fixed composition (for 30 questions): 10 mcq + 10 saq + 10 laq.

Flow:
1. Reject content shorter than MIN_CONTENT_LENGTH (no model call)
2. Truncate to the first CONTENT_CHAR_LIMIT characters. This is a lossy
   prefix cut, not a summary: later parts of long documents are not quizzed.
3. One chat call asking for ONLY a JSON array
4. Repair (strip code fences) → parse → per-question validation
5. If any question is invalid, regenerate the whole batch once and keep
   the better attempt
"""

import asyncio
import logging
from typing import Optional

from config import Settings
from errors import (
    EmptyQuestionSetError,
    InputValidationError,
    QuizGenerationError,
    UpstreamError,
    UpstreamTimeoutError,
)
from generation.gpt_client import ChatClient
from generation.schemas import QuizComposition, QuizResult, ValidationReport
from generation.validator import parse_question_array, validate_question_set

log = logging.getLogger("rag.pipeline")

MIN_CONTENT_LENGTH = 100
CONTENT_CHAR_LIMIT = 8000
MAX_QUESTION_COUNT = 60
MAX_GENERATION_ATTEMPTS = 2


# ─── Quiz Prompt ──────────────────────────────────────────────────────────────

QUIZ_SYSTEM = "You are an expert teacher who writes self-test questions. Output only valid JSON."

QUIZ_PROMPT = """Generate exactly {total} questions from the content below:
- {mcq} Multiple Choice Questions (type "mcq") with exactly 4 options each
- {saq} Short Answer Questions (type "saq")
- {laq} Long Answer Questions (type "laq")

CONTENT (use ONLY information from this text):
---
{content}
---

OUTPUT FORMAT — respond with ONLY a valid JSON array, no markdown, no explanation:
[
  {{
    "type": "mcq",
    "question": "<clear, unambiguous question stem>",
    "options": ["<option 1>", "<option 2>", "<option 3>", "<option 4>"],
    "correctAnswer": "<the exact text of the correct option>",
    "explanation": "<why the answer is correct>"
  }},
  {{
    "type": "saq",
    "question": "<question answerable in 1-2 sentences>",
    "correctAnswer": "<model answer>",
    "explanation": "<brief justification>"
  }},
  {{
    "type": "laq",
    "question": "<question requiring a paragraph-length answer>",
    "correctAnswer": "<model answer>",
    "explanation": "<key points a good answer covers>"
  }}
]

RULES:
1. mcq options must be 4 distinct, plausible choices; correctAnswer must be copied exactly from options
2. saq and laq questions have NO "options" field
3. Do NOT use "All of the above" or "None of the above"
4. Return ONLY the JSON array
"""


def split_composition(question_count: int) -> QuizComposition:
    """Split a question count into mcq / saq / laq thirds (remainder to mcq, then saq)."""
    base, remainder = divmod(question_count, 3)
    return QuizComposition(
        mcq=base + (1 if remainder >= 1 else 0),
        saq=base + (1 if remainder >= 2 else 0),
        laq=base,
    )


def build_quiz_prompt(content: str, composition: QuizComposition) -> str:
    return QUIZ_PROMPT.format(
        total=composition.total,
        mcq=composition.mcq,
        saq=composition.saq,
        laq=composition.laq,
        content=content,
    )


class QuizGenerator:
    """Generates and validates quiz question sets."""

    def __init__(self, chat: ChatClient, settings: Settings):
        self.chat = chat
        self.settings = settings

    async def _generate_once(self, prompt: str) -> ValidationReport:
        try:
            raw = await asyncio.wait_for(
                self.chat.call_gpt(
                    prompt,
                    system=QUIZ_SYSTEM,
                    temperature=self.settings.quiz_temperature,
                    max_tokens=self.settings.quiz_max_tokens,
                ),
                timeout=self.settings.quiz_timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            raise UpstreamTimeoutError(
                "Quiz generation timed out",
                f"exceeded {self.settings.quiz_timeout_seconds}s",
            ) from e

        items = parse_question_array(raw)
        return validate_question_set(items, strict=self.settings.strict_quiz_validation)

    async def generate(self, content: Optional[str], question_count: int = 30) -> QuizResult:
        """
        Generate a validated question set from document text.

        Raises:
            InputValidationError: content shorter than 100 characters or bad count
            EmptyModelOutputError / MalformedModelOutputError / EmptyQuestionSetError
            ChatProviderError / UpstreamTimeoutError
        """
        content = content or ""
        if len(content) < MIN_CONTENT_LENGTH:
            raise InputValidationError(
                f"Content must be at least {MIN_CONTENT_LENGTH} characters long",
                f"got {len(content)} characters",
            )
        if question_count < 1 or question_count > MAX_QUESTION_COUNT:
            raise InputValidationError(f"questionCount must be between 1 and {MAX_QUESTION_COUNT}")

        truncated = len(content) > CONTENT_CHAR_LIMIT
        if truncated:
            log.info(f"[QUIZ] content truncated from {len(content)} to {CONTENT_CHAR_LIMIT} characters")
        composition = split_composition(question_count)
        prompt = build_quiz_prompt(content[:CONTENT_CHAR_LIMIT], composition)

        best: Optional[ValidationReport] = None
        attempts = 0
        for attempts in range(1, MAX_GENERATION_ATTEMPTS + 1):
            try:
                report = await self._generate_once(prompt)
            except (QuizGenerationError, UpstreamError) as e:
                # a failed regeneration falls back to the valid items already in hand
                if best is None or not best.questions:
                    raise
                log.warning(f"[QUIZ] attempt {attempts} failed, keeping the previous attempt: {e}")
                break
            log.info(f"[QUIZ] attempt {attempts}: {len(report.questions)} valid, {len(report.rejected)} rejected")
            if best is None or len(report.questions) > len(best.questions) or not report.rejected:
                best = report
            if not report.rejected:
                break
            for rejected in report.rejected:
                log.warning(f"[QUIZ] attempt {attempts}: item {rejected.index} rejected: {rejected.reason}")

        if not best.questions:
            reasons = "; ".join(sorted({r.reason for r in best.rejected}))
            raise EmptyQuestionSetError("Model returned no valid questions", reasons or None)

        questions = best.questions[:question_count]
        return QuizResult(
            questions=questions,
            rejected=len(best.rejected),
            generation_attempts=attempts,
            content_truncated=truncated,
        )
