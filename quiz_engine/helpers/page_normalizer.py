"""
Normalize teacher-submitted quiz content into an ordered list of pages.

Three payload shapes have been sent by editor versions over time and are
all still accepted:

    A. {"pages": [{"id", "title", "questions": [...]}, ...]}
    B. [{"title", "questions": [...]}, ...]     (bare list of pages)
    C. [question, question, ...]                 (flat list of questions)

Shape C (and anything unrecognizable) becomes a single page titled
"Page 1". Every question goes through the sanitizer.
"""
import uuid
from typing import Any, Dict, List

from quiz_engine.helpers.coercion import to_text
from quiz_engine.helpers.question_sanitizer import sanitize_question

PAGED = "paged"
PAGE_LIST = "page_list"
FLAT = "flat"


def make_page_id(page_index: int) -> str:
    return f"srv-page-{page_index}-{uuid.uuid4().hex}"


def detect_shape(raw: Any) -> str:
    if isinstance(raw, dict) and isinstance(raw.get("pages"), list):
        return PAGED
    if (
        isinstance(raw, list)
        and raw
        and isinstance(raw[0], dict)
        and isinstance(raw[0].get("questions"), list)
    ):
        return PAGE_LIST
    return FLAT


def _normalize_page(raw_page: Any, page_index: int) -> Dict[str, Any]:
    page = raw_page if isinstance(raw_page, dict) else {}
    raw_title = page.get("title")
    raw_questions = page.get("questions")

    return {
        "id": to_text(page["id"]) if page.get("id") else make_page_id(page_index),
        "title": f"Page {page_index + 1}" if raw_title is None else to_text(raw_title),
        "questions": [
            sanitize_question(q, page_index, q_index)
            for q_index, q in enumerate(raw_questions)
        ] if isinstance(raw_questions, list) else [],
    }


def normalize_to_pages(raw_questions: Any) -> List[Dict[str, Any]]:
    shape = detect_shape(raw_questions)

    if shape == PAGED:
        return [
            _normalize_page(page, page_index)
            for page_index, page in enumerate(raw_questions["pages"])
        ]

    if shape == PAGE_LIST:
        return [
            _normalize_page(page, page_index)
            for page_index, page in enumerate(raw_questions)
        ]

    flat = raw_questions if isinstance(raw_questions, list) else []
    return [
        {
            "id": make_page_id(0),
            "title": "Page 1",
            "questions": [
                sanitize_question(q, 0, q_index)
                for q_index, q in enumerate(flat)
            ],
        }
    ]
