import json
import logging
import re
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

_TITLE_RE = re.compile(r'"title"\s*:\s*"((?:[^"\\]|\\.)*)"', re.DOTALL)
_CONTENT_RE = re.compile(r'"content"\s*:\s*"((?:[^"\\]|\\.)*)', re.DOTALL)
_DIFFICULTY_RE = re.compile(r'"difficulty"\s*:\s*"((?:[^"\\]|\\.)*)"')


def strip_code_fences(text: str) -> str:
    """Remove a surrounding ```json / ``` markdown fence from model output."""
    text = (text or "").strip()
    if text.startswith("```json"):
        text = text[7:]
    elif text.startswith("```"):
        text = text[3:]
    if text.endswith("```"):
        text = text[:-3]
    return text.strip()


def safe_json_parse(text: str) -> Any:
    """Parse JSON robustly from LLM output.

    This function attempts several heuristics:
    - strip markdown fences
    - remove trailing diagnostic text after common markers (Error, Traceback)
    - locate the first JSON object/array and extract a balanced chunk while ignoring strings
    - try simple repairs (append missing closing braces/brackets, remove trailing commas)

    Raises ValueError with a helpful message when parsing ultimately fails.
    """
    if not text or not text.strip():
        raise ValueError("LLM returned empty response.")

    text = strip_code_fences(text)
    if not text:
        raise ValueError("LLM response was empty after cleaning.")

    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    for marker in ("\nError:", "\nTraceback", "\nException:", "Error:", "Traceback (most recent call last)"):
        idx = text.find(marker)
        if idx != -1:
            text = text[:idx].strip()

    first_curly = text.find("{")
    first_brack = text.find("[")
    if first_curly == -1 and first_brack == -1:
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise ValueError(f"Failed to find JSON object/array in LLM response. Response start: {text[:200]}... Error: {e}")

    if first_curly == -1:
        start = first_brack
    elif first_brack == -1:
        start = first_curly
    else:
        start = min(first_curly, first_brack)

    # Walk to find a balanced JSON chunk (ignore characters inside strings)
    stack: List[str] = []
    in_string = False
    escape = False
    end = None
    for i, ch in enumerate(text[start:], start):
        if escape:
            escape = False
            continue
        if ch == "\\" and in_string:
            escape = True
            continue
        if ch == '"':
            in_string = not in_string
            continue
        if in_string:
            continue
        if ch in "{[":
            stack.append(ch)
        elif ch in "}]":
            if not stack:
                continue
            stack.pop()
            if not stack:
                end = i
                break

    if end is None:
        closers = "".join("}" if open_ch == "{" else "]" for open_ch in reversed(stack))
        try:
            return json.loads(text[start:] + closers)
        except json.JSONDecodeError:
            raise ValueError(f"Failed to parse JSON from LLM response. Response snippet: {text[start:start+200]}...")

    candidate = text[start:end + 1]
    try:
        return json.loads(candidate)
    except json.JSONDecodeError:
        # remove trailing commas before closing braces/brackets
        cleaned = re.sub(r",(\s*[}\]])", r"\1", candidate)
        try:
            return json.loads(cleaned)
        except json.JSONDecodeError as e:
            raise ValueError(f"Failed to parse JSON from LLM response. Candidate: {candidate[:400]}... Error: {e}")


def _unescape(value: str) -> str:
    try:
        return json.loads(f'"{value}"')
    except json.JSONDecodeError:
        return value


def _extract_field(pattern: re.Pattern, text: str) -> Optional[str]:
    match = pattern.search(text)
    if not match:
        return None
    value = _unescape(match.group(1)).strip()
    return value or None


def parse_passage(text: str, fallback_title: str) -> Dict[str, str]:
    """Turn a content response into title/content/difficulty, never failing on non-empty text.

    Tries a strict JSON parse, then regex extraction of the fields from
    malformed JSON, then uses the raw response as the body.
    """
    cleaned = strip_code_fences(text)

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError:
        data = None
    if isinstance(data, dict) and data.get("content"):
        content = data["content"]
        return {
            "title": str(data.get("title") or fallback_title),
            "content": content if isinstance(content, str) else json.dumps(content, ensure_ascii=False),
            "difficulty": str(data.get("difficulty") or "Beginner"),
        }

    content = _extract_field(_CONTENT_RE, cleaned)
    if content:
        logger.info("Content response was not valid JSON; recovered fields with regex")
        return {
            "title": _extract_field(_TITLE_RE, cleaned) or fallback_title,
            "content": content,
            "difficulty": _extract_field(_DIFFICULTY_RE, cleaned) or "Beginner",
        }

    logger.warning("Could not parse content response; using raw text")
    return {"title": fallback_title, "content": cleaned or text, "difficulty": "Beginner"}


def parse_question_candidates(text: str) -> List[Any]:
    """Return the list of question objects from a quiz response.

    Accepts a bare JSON array or an object holding a "questions" array.
    Raises ValueError when no such list can be found.
    """
    data = safe_json_parse(text)
    if isinstance(data, dict):
        data = data.get("questions")
    if not isinstance(data, list):
        raise ValueError("Quiz generation result is not a list.")
    return data
