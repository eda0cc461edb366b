from typing import Any, Dict

ANSWER_FIELDS = ("correctAnswer", "answer")


def strip_answers(question: Any) -> Dict[str, Any]:
    if not isinstance(question, dict):
        return {}
    return {key: value for key, value in question.items() if key not in ANSWER_FIELDS}


def _redact_page(page: Any) -> Dict[str, Any]:
    page = page if isinstance(page, dict) else {}
    questions = page.get("questions")
    return {
        "id": page.get("id"),
        "title": page.get("title"),
        "questions": [strip_answers(q) for q in questions] if isinstance(questions, list) else [],
    }


def redact_answers(structure: Any) -> Any:
    """
    Remove answer keys from quiz content shown to non-owners.

    Accepts the paged form ``{"pages": [...]}`` or a flat question list and
    returns a new structure with the same pages and questions, in the same
    order, minus ``correctAnswer``/``answer``. The input is not modified.
    """
    if isinstance(structure, dict) and isinstance(structure.get("pages"), list):
        return {"pages": [_redact_page(page) for page in structure["pages"]]}

    if isinstance(structure, list):
        return [strip_answers(q) for q in structure]

    return structure
