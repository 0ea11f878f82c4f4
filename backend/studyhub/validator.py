"""
Structural and content checks for LLM-proposed multiple-choice questions.

A candidate is a dict with keys: question, options, correctAnswer,
explanation, difficulty. ``validate_candidate`` returns a cleaned copy on
acceptance (the correct answer rewritten to the exact option text) or
``None`` on rejection. It never raises.
"""

import logging
import re
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

QUESTION_MIN_LEN = 10
QUESTION_MAX_LEN = 300
OPTION_MIN_LEN = 2
OPTION_MAX_LEN = 200
OPTION_COUNT = 4

BANNED_ANSWER_PHRASES = (
    "all of the above",
    "none of the above",
    "both a and b",
    "a and b",
    "all of these",
    "none of these",
)

_LETTER_PREFIX_RE = re.compile(r"^[a-z][.)]\s+")


def _normalize(text: str) -> str:
    return text.strip().lower()


def _strip_letter_prefix(text: str) -> str:
    return _LETTER_PREFIX_RE.sub("", _normalize(text), count=1)


def _match_option(answer: str, options: List[str]) -> Optional[str]:
    """Return the option the answer refers to, or None."""
    wanted = _normalize(answer)
    for option in options:
        if _normalize(option) == wanted:
            return option

    wanted = _strip_letter_prefix(answer)
    for option in options:
        if _strip_letter_prefix(option) == wanted:
            return option
    return None


def _reject(reason: str, candidate: Any) -> None:
    logger.debug("Rejected candidate (%s): %r", reason, candidate)
    return None


def validate_candidate(candidate: Any) -> Optional[Dict[str, Any]]:
    if not isinstance(candidate, dict):
        return _reject("not an object", candidate)

    question = candidate.get("question")
    if not isinstance(question, str):
        return _reject("question missing", candidate)
    if not QUESTION_MIN_LEN <= len(question.strip()) <= QUESTION_MAX_LEN:
        return _reject("question length", candidate)

    options = candidate.get("options")
    if not isinstance(options, list) or len(options) != OPTION_COUNT:
        return _reject("option count", candidate)
    for option in options:
        if not isinstance(option, str):
            return _reject("option missing", candidate)
        if not OPTION_MIN_LEN <= len(option.strip()) <= OPTION_MAX_LEN:
            return _reject("option length", candidate)
    if len({_normalize(option) for option in options}) != OPTION_COUNT:
        return _reject("duplicate options", candidate)

    answer = candidate.get("correctAnswer")
    if not isinstance(answer, str):
        return _reject("answer missing", candidate)
    matched = _match_option(answer, options)
    if matched is None:
        return _reject("answer not among options", candidate)

    normalized_answer = _normalize(matched)
    if any(phrase in normalized_answer for phrase in BANNED_ANSWER_PHRASES):
        return _reject("meta answer", candidate)

    cleaned = dict(candidate)
    cleaned["correctAnswer"] = matched
    return cleaned


def is_valid(candidate: Any) -> bool:
    return validate_candidate(candidate) is not None
