import json
import logging
from typing import Any, Dict, List, Tuple
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from quiz_engine.config import TITLE_MAX_LENGTH
from quiz_engine.helpers.coercion import to_text
from quiz_engine.models import QuizPage

logger = logging.getLogger(__name__)


def parse_page_questions(content_json: Any) -> List[Dict[str, Any]]:
    """
    Extract the question list from a stored page payload.

    Accepts ``{"questions": [...]}`` or a bare list. Raises ValueError
    when the payload cannot be decoded or carries no question list.
    """
    parsed = json.loads(content_json or "[]") if isinstance(content_json, str) else content_json

    if isinstance(parsed, list):
        return parsed
    if isinstance(parsed, dict) and isinstance(parsed.get("questions"), list):
        return parsed["questions"]
    raise ValueError("page payload has no question list")


async def write_pages(db: AsyncSession, quiz_id: UUID, pages: List[Dict[str, Any]]) -> None:
    """
    Replace every page of a quiz with ``pages``, in order.

    Deletes and re-inserts inside the caller's transaction; the caller
    commits once so readers never observe a half-written page set.
    """
    await db.execute(delete(QuizPage).where(QuizPage.quiz_id == quiz_id))

    for page_index, page in enumerate(pages):
        page = page or {}
        raw_title = page.get("title")
        title = (f"Page {page_index + 1}" if raw_title is None else to_text(raw_title))[:TITLE_MAX_LENGTH]
        questions = page.get("questions")

        db.add(
            QuizPage(
                quiz_id=quiz_id,
                page_index=page_index,
                page_key=to_text(page.get("id") or f"page-{page_index}"),
                title=title,
                content_json=json.dumps(
                    {"questions": questions if isinstance(questions, list) else []}
                ),
            )
        )

    await db.flush()
    logger.info(f"Wrote {len(pages)} page(s) for quiz {quiz_id}")


async def load_pages(db: AsyncSession, quiz_id: UUID) -> List[Dict[str, Any]]:
    result = await db.execute(
        select(QuizPage)
        .where(QuizPage.quiz_id == quiz_id)
        .order_by(QuizPage.page_index.asc())
    )
    rows = result.scalars().all()

    pages = []
    for row in rows:
        try:
            questions = parse_page_questions(row.content_json)
        except (ValueError, TypeError) as e:
            # Malformed payload: keep the page, drop its questions
            logger.warning(
                f"Malformed content_json on page {row.page_index} of quiz {quiz_id}: {str(e)}"
            )
            questions = []

        pages.append({
            "id": row.page_key,
            "title": row.title,
            "questions": questions,
        })

    return pages


async def count_questions(db: AsyncSession, quiz_id: UUID) -> Tuple[int, int]:
    """Return (pages_count, questions_count) for a quiz."""
    pages = await load_pages(db, quiz_id)
    return len(pages), sum(len(page["questions"]) for page in pages)


def flatten_questions(pages: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [
        question
        for page in pages
        for question in (page.get("questions") or [])
    ]
