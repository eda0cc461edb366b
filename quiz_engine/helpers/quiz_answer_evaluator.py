import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from quiz_engine.helpers.coercion import to_text
from quiz_engine.models import AttemptStatus


@dataclass
class ScoreResult:
    score: Optional[int]
    status: AttemptStatus
    grading: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    correct_count: int = 0
    scored_count: int = 0

    @property
    def requires_manual_grading(self) -> bool:
        return self.status == AttemptStatus.NEEDS_GRADING


def canonical_answer(question: Dict[str, Any]) -> Any:
    answer = question.get("correctAnswer")
    if answer is None:
        answer = question.get("answer")
    return answer


def is_answer_correct(expected: Any, given: Any) -> bool:
    """
    Compare a given answer against the canonical one.

    List answers (checkboxes) match when both sides have the same length
    and the same members, compared as text in any order. Anything else is
    an exact, case-sensitive text comparison.
    """
    if isinstance(expected, list):
        given_items = [to_text(v) for v in given] if isinstance(given, list) else []
        return len(expected) == len(given_items) and all(
            to_text(v) in given_items for v in expected
        )
    return to_text(given) == to_text(expected)


def percentage(correct: int, total: int) -> int:
    if not total:
        return 0
    # half-up rounding
    return math.floor(correct / total * 100 + 0.5)


def evaluate_quiz_answers(
    questions: List[Dict[str, Any]],
    answers: Any,
) -> ScoreResult:
    """
    Score a submission against the flattened question list.

    - requiresManualGrading questions are recorded unscored and force
      the attempt into needs_grading with a null score
    - questions without a canonical answer are skipped entirely
    - every other question counts once toward the denominator
    """
    answers = answers if isinstance(answers, dict) else {}

    grading: Dict[str, Dict[str, Any]] = {}
    correct_count = 0
    scored_count = 0
    manual_grading_required = False

    for question in questions:
        if not isinstance(question, dict):
            continue

        q_id = question.get("id")
        given = answers.get(q_id)

        if question.get("requiresManualGrading"):
            grading[q_id] = {
                "requiresManualGrading": True,
                "answer": given,
                "scored": False,
            }
            manual_grading_required = True
            continue

        expected = canonical_answer(question)
        if expected is None:
            continue

        scored_count += 1
        is_correct = is_answer_correct(expected, given)
        if is_correct:
            correct_count += 1

        grading[q_id] = {
            "correct": is_correct,
            "given": given,
            "expected": expected,
            "scored": True,
        }

    if manual_grading_required:
        return ScoreResult(
            score=None,
            status=AttemptStatus.NEEDS_GRADING,
            grading=grading,
            correct_count=correct_count,
            scored_count=scored_count,
        )

    return ScoreResult(
        score=percentage(correct_count, scored_count),
        status=AttemptStatus.COMPLETED,
        grading=grading,
        correct_count=correct_count,
        scored_count=scored_count,
    )
