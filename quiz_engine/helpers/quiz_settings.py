from typing import Any, Dict, Optional

from quiz_engine.config import MAX_ATTEMPTS_ALLOWED, TITLE_MAX_LENGTH
from quiz_engine.helpers.coercion import as_int, clamp, to_text
from quiz_engine.schemas.quiz import QuizCreate

UNTITLED_QUIZ = "Untitled Quiz"


def clean_title(raw_title: Any) -> str:
    title = "" if not raw_title else to_text(raw_title).strip()
    return (title or UNTITLED_QUIZ)[:TITLE_MAX_LENGTH]


def clean_attempts_allowed(raw: Any) -> Optional[int]:
    """1..MAX_ATTEMPTS_ALLOWED; an explicit null means unbounded."""
    if raw is None:
        return None
    return clamp(as_int(raw, 1), 1, MAX_ATTEMPTS_ALLOWED)


def clean_time_limit(raw: Any) -> Optional[int]:
    seconds = as_int(raw, 0)
    return seconds if seconds > 0 else None


def quiz_settings(quiz_in: QuizCreate) -> Dict[str, Any]:
    """Column values for a Quiz row from a create/update payload."""
    return {
        "title": clean_title(quiz_in.title),
        "attempts_allowed": clean_attempts_allowed(quiz_in.attempts_allowed),
        "start_time": quiz_in.start_time,
        "end_time": quiz_in.end_time,
        "time_limit_seconds": clean_time_limit(quiz_in.time_limit_seconds),
    }
