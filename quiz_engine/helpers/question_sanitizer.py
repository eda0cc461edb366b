import uuid
from typing import Any, Dict, List

from quiz_engine.helpers.coercion import as_int, clamp, to_text

QUESTION_TYPES = ("multiple_choice", "checkboxes", "short_answer", "paragraph")
CHOICE_TYPES = ("multiple_choice", "checkboxes")

UNTITLED_QUESTION = "Untitled question"
PLACEHOLDER_OPTIONS = ["Option 1", "Option 2"]

SHORT_ANSWER_MIN_SENTENCES = 1
SHORT_ANSWER_MAX_SENTENCES = 3
PARAGRAPH_MIN_SENTENCES = 3


def make_question_id(page_index: int, question_index: int) -> str:
    return f"srv-q-{page_index}-{question_index}-{uuid.uuid4().hex}"


def _clean_options(raw_options: Any) -> List[str]:
    if not isinstance(raw_options, list):
        return list(PLACEHOLDER_OPTIONS)

    options = [to_text(opt) for opt in raw_options if opt is not None]
    if len(options) < 2:
        return list(PLACEHOLDER_OPTIONS)
    return options


def sanitize_question(raw: Any, page_index: int, question_index: int) -> Dict[str, Any]:
    """
    Normalize one client-submitted question into its canonical shape.

    Never raises: anything invalid degrades to a default (unknown type
    becomes multiple_choice, out-of-range answer indices are dropped,
    missing options become two placeholders).

    Returns:
        dict with id, type, text, requiresManualGrading and the
        type-specific keys (options / sentenceLimit / correctAnswer)
    """
    q = raw if isinstance(raw, dict) else {}

    q_type = q.get("type") if q.get("type") in QUESTION_TYPES else "multiple_choice"

    raw_id = q.get("id")
    raw_text = q.get("text")

    question: Dict[str, Any] = {
        "id": to_text(raw_id) if raw_id else make_question_id(page_index, question_index),
        "type": q_type,
        "text": ("" if raw_text is None else to_text(raw_text)).strip() or UNTITLED_QUESTION,
        "requiresManualGrading": bool(q.get("requiresManualGrading")),
    }

    if q_type == "multiple_choice":
        options = _clean_options(q.get("options"))
        raw_answer = q.get("correctAnswer")
        index = None if raw_answer is None else as_int(raw_answer, -1)

        question["options"] = options
        question["correctAnswer"] = (
            str(index) if index is not None and 0 <= index < len(options) else None
        )
        return question

    if q_type == "checkboxes":
        options = _clean_options(q.get("options"))
        raw_answer = q.get("correctAnswer")
        indices = set()
        if isinstance(raw_answer, list):
            for value in raw_answer:
                index = as_int(value, -1)
                if 0 <= index < len(options):
                    indices.add(index)

        question["options"] = options
        question["correctAnswer"] = sorted(indices)
        return question

    raw_limit = q.get("sentenceLimit")
    raw_answer = q.get("correctAnswer")

    if q_type == "short_answer":
        limit = as_int(SHORT_ANSWER_MIN_SENTENCES if raw_limit is None else raw_limit, SHORT_ANSWER_MIN_SENTENCES)
        question["sentenceLimit"] = clamp(limit, SHORT_ANSWER_MIN_SENTENCES, SHORT_ANSWER_MAX_SENTENCES)
    else:
        limit = as_int(PARAGRAPH_MIN_SENTENCES if raw_limit is None else raw_limit, PARAGRAPH_MIN_SENTENCES)
        question["sentenceLimit"] = max(PARAGRAPH_MIN_SENTENCES, limit)

    question["correctAnswer"] = "" if raw_answer is None else to_text(raw_answer)
    return question
