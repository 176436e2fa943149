"""
Quiz output repair + validation

Repair pass:
- Strip the Markdown code fence the model may wrap its answer in
  (```json ... ``` or ``` ... ```), even when prose surrounds it
Parse:
- JSON array with at least one item is the minimum structural bar
- Empty output / invalid JSON / non-array / empty array raise distinct errors
Per-question validation:
- type in {mcq, saq, laq}; question and correctAnswer non-empty
- mcq: exactly 4 distinct non-empty options, correctAnswer among them
  (a bare letter "A".."D" or a case/whitespace variant is repaired to the
  exact option text)
"""

import json
import re
from typing import Any, List, Optional, Tuple

from pydantic import ValidationError

from errors import EmptyModelOutputError, EmptyQuestionSetError, MalformedModelOutputError
from generation.schemas import MCQ_OPTION_COUNT, QuizQuestion, RejectedQuestion, ValidationReport

CODE_FENCE = re.compile(r"```[ \t]*(?:json|JSON)?[ \t]*\r?\n?(.*?)```", re.DOTALL)
OPTION_LETTERS = "ABCD"
VALID_TYPES = ("mcq", "saq", "laq")
TYPE_ALIASES = {
    "multiple_choice": "mcq",
    "multiple-choice": "mcq",
    "short_answer": "saq",
    "short-answer": "saq",
    "long_answer": "laq",
    "long-answer": "laq",
}


# ─── Repair pass ──────────────────────────────────────────────────────────────

def strip_code_fences(raw: Optional[str]) -> str:
    """Return the inner content of the first fenced block, else the stripped input."""
    if not raw:
        return ""
    match = CODE_FENCE.search(raw)
    if match:
        return match.group(1).strip()
    # unterminated fence (output cut off at max_tokens)
    text = raw.strip()
    if text.startswith("```"):
        text = re.sub(r"^```(?:json|JSON)?\s*", "", text)
    return text.strip()


def parse_question_array(raw: Optional[str]) -> List[Any]:
    """
    Repair and parse the model's raw output into a non-empty list.

    Raises:
        EmptyModelOutputError: nothing (or only whitespace/fences) came back
        MalformedModelOutputError: not JSON after repair (reason=invalid_json)
            or JSON that is not an array (reason=not_an_array)
        EmptyQuestionSetError: a JSON array with no items
    """
    if not raw or not raw.strip():
        raise EmptyModelOutputError()

    try:
        # well-formed output is taken as is; backticks inside its strings are not fences
        data = json.loads(raw.strip())
    except json.JSONDecodeError:
        text = strip_code_fences(raw)
        if not text:
            raise EmptyModelOutputError(detail="Only a code fence was returned")
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise MalformedModelOutputError(detail=f"{e.msg} at position {e.pos}: {text[:200]}") from e

    if isinstance(data, dict):
        # {"questions": [...]} is a common near-miss
        inner = data.get("questions")
        if isinstance(inner, list):
            data = inner
    if not isinstance(data, list):
        raise MalformedModelOutputError(
            "Model output is not a JSON array",
            f"got {type(data).__name__}",
            reason="not_an_array",
        )
    if not data:
        raise EmptyQuestionSetError()
    return data


# ─── Per-question validation ──────────────────────────────────────────────────

def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value.strip() if isinstance(value, str) else ""


def _normalize_type(value: Any) -> str:
    t = _text(value).lower()
    return TYPE_ALIASES.get(t, t)


def _resolve_mcq_answer(answer: str, options: List[str]) -> Optional[str]:
    """Map the model's answer onto the exact option text, or None."""
    if answer in options:
        return answer
    folded = answer.strip().lower()
    for option in options:
        if option.strip().lower() == folded:
            return option
    letter = answer.strip().rstrip(").:").upper()
    if len(letter) == 1 and letter in OPTION_LETTERS[:len(options)]:
        return options[OPTION_LETTERS.index(letter)]
    # "B) Mitochondria" / "B. Mitochondria"
    prefixed = re.match(r"^([A-Da-d])[).:]\s*(.+)$", answer.strip())
    if prefixed:
        candidate = options[OPTION_LETTERS.index(prefixed.group(1).upper())]
        if candidate.strip().lower() == prefixed.group(2).strip().lower():
            return candidate
    return None


def validate_question(item: Any, index: int) -> Tuple[Optional[QuizQuestion], Optional[str]]:
    """
    Validate and normalize one raw question.

    Returns:
        (question, None) when valid, (None, reason) when rejected
    """
    if not isinstance(item, dict):
        return None, f"item is {type(item).__name__}, not an object"

    qtype = _normalize_type(item.get("type"))
    if qtype not in VALID_TYPES:
        return None, f"unknown question type {item.get('type')!r}"

    question = _text(item.get("question"))
    if not question:
        return None, "question is empty"

    answer = _text(item.get("correctAnswer", item.get("correct_answer")))
    if not answer:
        return None, "correctAnswer is empty"

    options: Optional[List[str]] = None
    if qtype == "mcq":
        raw_options = item.get("options")
        if not isinstance(raw_options, list):
            return None, "mcq options missing"
        options = [_text(o) for o in raw_options]
        if len(options) != MCQ_OPTION_COUNT:
            return None, f"mcq needs exactly {MCQ_OPTION_COUNT} options, got {len(options)}"
        if any(not o for o in options):
            return None, "mcq has an empty option"
        if len({o.lower() for o in options}) != MCQ_OPTION_COUNT:
            return None, "mcq options are not distinct"
        resolved = _resolve_mcq_answer(answer, options)
        if resolved is None:
            return None, "correctAnswer is not one of the options"
        answer = resolved

    qid = _text(item.get("id")) or f"q{index + 1}"
    try:
        return QuizQuestion(
            id=qid,
            type=qtype,
            question=question,
            options=options,
            correct_answer=answer,
            explanation=_text(item.get("explanation")),
        ), None
    except ValidationError as e:
        return None, e.errors()[0].get("msg", "invalid question")


def validate_question_set(items: List[Any], strict: bool = True) -> ValidationReport:
    """
    Validate every item of a parsed question array.

    strict=True: invalid items are reported in `rejected`.
    strict=False: lenient mode; items are still normalized but only items
    that cannot be represented at all (non-objects, unknown types, missing
    text) are dropped, and mcq shape problems are tolerated by demoting the
    item to a short-answer question.
    Duplicate ids are re-numbered so ids stay unique within the set.
    """
    report = ValidationReport()
    seen_ids = set()
    for index, item in enumerate(items):
        question, reason = validate_question(item, index)
        if question is None and not strict and isinstance(item, dict):
            question = _lenient(item, index)
        if question is None:
            report.rejected.append(RejectedQuestion(index=index, reason=reason or "invalid"))
            continue
        if question.id in seen_ids:
            new_id, n = f"q{index + 1}", 1
            while new_id in seen_ids:
                n += 1
                new_id = f"q{index + 1}_{n}"
            question = question.model_copy(update={"id": new_id})
        seen_ids.add(question.id)
        report.questions.append(question)
    return report


def _lenient(item: dict, index: int) -> Optional[QuizQuestion]:
    question = _text(item.get("question"))
    answer = _text(item.get("correctAnswer", item.get("correct_answer")))
    qtype = _normalize_type(item.get("type"))
    if not question or not answer or qtype not in VALID_TYPES:
        return None
    return QuizQuestion(
        id=_text(item.get("id")) or f"q{index + 1}",
        type="saq" if qtype == "mcq" else qtype,
        question=question,
        correct_answer=answer,
        explanation=_text(item.get("explanation")),
    )
