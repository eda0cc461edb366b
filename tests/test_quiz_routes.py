from datetime import datetime, timedelta

from sqlalchemy import select

from quiz_engine.models import QuizAttempt, QuizPage

QUIZ_BODY = {
    "title": "  Week 1  ",
    "attemptsAllowed": 2,
    "timeLimitSeconds": 0,
    "questions": {
        "pages": [
            {
                "id": "intro",
                "title": "Warm up",
                "questions": [
                    {"id": "q1", "type": "multiple_choice", "text": "1+1?", "options": ["1", "2"], "correctAnswer": 1},
                    {"id": "q2", "type": "checkboxes", "text": "Evens", "options": ["2", "3", "4"], "correctAnswer": [2, 0]},
                ],
            },
            {
                "title": "Words",
                "questions": [
                    {"id": "q3", "type": "short_answer", "text": "Capital of France", "correctAnswer": "Paris"},
                ],
            },
        ]
    },
}


async def create_quiz(client, headers, body=None, code="ABC123"):
    response = await client.post(f"/teacher/quiz/create-quiz/{code}", json=body or QUIZ_BODY, headers=headers.teacher)
    assert response.status_code == 201, response.text
    return response.json()


async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


async def test_requires_token(client, seed):
    response = await client.get("/quiz/classroom/ABC123")
    assert response.status_code in (401, 403)


async def test_create_quiz(client, headers):
    created = await create_quiz(client, headers)

    assert created["title"] == "Week 1"
    assert created["pages_count"] == 2
    assert created["question_count"] == 3


async def test_create_quiz_only_by_classroom_teacher(client, headers):
    response = await client.post("/teacher/quiz/create-quiz/ABC123", json=QUIZ_BODY, headers=headers.other_teacher)
    assert response.status_code == 403
    assert response.json()["error"] == "forbidden"

    response = await client.post("/teacher/quiz/create-quiz/ABC123", json=QUIZ_BODY, headers=headers.student)
    assert response.status_code == 403

    response = await client.post("/teacher/quiz/create-quiz/NOPE00", json=QUIZ_BODY, headers=headers.teacher)
    assert response.status_code == 404


async def test_owner_sees_answers_student_does_not(client, headers):
    created = await create_quiz(client, headers)

    owner_view = (await client.get(f"/quiz/{created['id']}", headers=headers.teacher)).json()
    assert owner_view["is_owner"] is True
    first_page = owner_view["questions"]["pages"][0]
    assert first_page["id"] == "intro"
    assert first_page["questions"][0]["correctAnswer"] == "1"
    assert first_page["questions"][1]["correctAnswer"] == [0, 2]

    student_view = (await client.get(f"/quiz/{created['id']}", headers=headers.student)).json()
    assert student_view["is_owner"] is False
    assert student_view["attempts_used"] == 0
    assert student_view["attempts_remaining"] == 2
    pages = student_view["questions"]["pages"]
    assert [p["title"] for p in pages] == ["Warm up", "Words"]
    for page in pages:
        for question in page["questions"]:
            assert "correctAnswer" not in question
            assert "answer" not in question
    assert pages[0]["questions"][0]["options"] == ["1", "2"]


async def test_non_members_cannot_view(client, headers):
    created = await create_quiz(client, headers)

    for who in (headers.outsider, headers.pending_student, headers.other_teacher):
        response = await client.get(f"/quiz/{created['id']}", headers=who)
        assert response.status_code == 403


async def test_list_classroom_quizzes(client, headers):
    await create_quiz(client, headers)
    await create_quiz(client, headers, body={"title": "", "questions": [{"text": "flat"}]})

    response = await client.get("/quiz/classroom/ABC123", headers=headers.student)
    assert response.status_code == 200
    items = response.json()

    assert len(items) == 2
    by_title = {item["title"]: item for item in items}
    assert by_title["Week 1"]["pages_count"] == 2
    assert by_title["Week 1"]["questions_count"] == 3
    assert by_title["Week 1"]["teacher_name"] == "Ada Teacher"
    assert by_title["Untitled Quiz"]["pages_count"] == 1
    assert by_title["Untitled Quiz"]["attempts_allowed"] == 1


async def test_update_replaces_pages(client, headers, session_factory):
    created = await create_quiz(client, headers)

    response = await client.put(
        f"/teacher/quiz/update-quiz/{created['id']}",
        json={"title": "Week 1 (v2)", "attemptsAllowed": None, "questions": [{"id": "only", "type": "paragraph"}]},
        headers=headers.teacher,
    )
    assert response.status_code == 200, response.text
    assert response.json()["pages_count"] == 1

    detail = (await client.get(f"/quiz/{created['id']}", headers=headers.student)).json()
    assert detail["title"] == "Week 1 (v2)"
    assert detail["attempts_allowed"] is None
    assert detail["attempts_remaining"] is None
    assert [q["id"] for q in detail["questions"]["pages"][0]["questions"]] == ["only"]

    async with session_factory() as session:
        rows = (await session.execute(select(QuizPage))).scalars().all()
        assert len(rows) == 1


async def test_update_by_non_owner(client, headers):
    created = await create_quiz(client, headers)

    response = await client.put(
        f"/teacher/quiz/update-quiz/{created['id']}",
        json={"title": "hijack"},
        headers=headers.other_teacher,
    )
    assert response.status_code == 403


async def test_delete_cascades(client, headers, session_factory):
    created = await create_quiz(client, headers)
    await client.post(f"/student/quiz-attempt/start-attempt/{created['id']}", headers=headers.student)

    response = await client.delete(f"/teacher/quiz/delete-quiz/{created['id']}", headers=headers.teacher)
    assert response.status_code == 204

    assert (await client.get(f"/quiz/{created['id']}", headers=headers.teacher)).status_code == 404

    async with session_factory() as session:
        assert (await session.execute(select(QuizPage))).scalars().all() == []
        assert (await session.execute(select(QuizAttempt))).scalars().all() == []


async def test_student_attempt_flow(client, headers):
    created = await create_quiz(client, headers)
    quiz_id = created["id"]

    started = await client.post(f"/student/quiz-attempt/start-attempt/{quiz_id}", headers=headers.student)
    assert started.status_code == 201, started.text
    attempt = started.json()
    assert attempt["attempt_no"] == 1
    assert attempt["expires_at"] is None

    submitted = await client.post(
        f"/student/quiz-attempt/submit-attempt/{quiz_id}",
        json={"attemptId": attempt["attempt_id"], "answers": {"q1": "1", "q2": [0, 2], "q3": "Lyon"}},
        headers=headers.student,
    )
    assert submitted.status_code == 200, submitted.text
    body = submitted.json()
    assert body["status"] == "completed"
    assert body["score"] == 67
    assert body["requires_manual_grading"] is False

    again = await client.post(
        f"/student/quiz-attempt/submit-attempt/{quiz_id}",
        json={"attemptId": attempt["attempt_id"], "answers": {}},
        headers=headers.student,
    )
    assert again.status_code == 400
    assert again.json()["reason"] == "already_submitted"

    mine = (await client.get(f"/student/quiz-attempt/my-attempts/{quiz_id}", headers=headers.student)).json()
    assert len(mine) == 1
    assert mine[0]["score"] == 67

    detail = (await client.get(f"/quiz/{quiz_id}", headers=headers.student)).json()
    assert detail["attempts_used"] == 1
    assert detail["attempts_remaining"] == 1


async def test_attempt_limit_over_http(client, headers):
    created = await create_quiz(client, headers, body={**QUIZ_BODY, "attemptsAllowed": 1})

    first = await client.post(f"/student/quiz-attempt/start-attempt/{created['id']}", headers=headers.student)
    assert first.status_code == 201

    second = await client.post(f"/student/quiz-attempt/start-attempt/{created['id']}", headers=headers.student)
    assert second.status_code == 400
    assert second.json() == {
        "error": "policy_violation",
        "reason": "no_attempts_remaining",
        "message": "No attempts remaining",
    }


async def test_closed_quiz_cannot_be_started(client, headers):
    yesterday = (datetime.utcnow() - timedelta(days=1)).isoformat()
    created = await create_quiz(client, headers, body={**QUIZ_BODY, "endTime": yesterday})

    response = await client.post(f"/student/quiz-attempt/start-attempt/{created['id']}", headers=headers.student)
    assert response.status_code == 400
    assert response.json()["reason"] == "quiz_closed"


async def test_non_member_cannot_start(client, headers):
    created = await create_quiz(client, headers)

    for who in (headers.outsider, headers.pending_student):
        response = await client.post(f"/student/quiz-attempt/start-attempt/{created['id']}", headers=who)
        assert response.status_code == 403


async def test_manual_grading_flow(client, headers):
    created = await create_quiz(client, headers, body={
        "title": "Essay",
        "questions": [{"id": "e1", "type": "paragraph", "requiresManualGrading": True}],
    })
    quiz_id = created["id"]

    attempt = (await client.post(f"/student/quiz-attempt/start-attempt/{quiz_id}", headers=headers.student)).json()
    submitted = (await client.post(
        f"/student/quiz-attempt/submit-attempt/{quiz_id}",
        json={"attemptId": attempt["attempt_id"], "answers": {"e1": "An essay"}},
        headers=headers.student,
    )).json()
    assert submitted["status"] == "needs_grading"
    assert submitted["score"] is None
    assert submitted["requires_manual_grading"] is True

    pending = await client.get(f"/teacher/quiz-attempt/list-attempts/{quiz_id}", headers=headers.teacher)
    assert pending.status_code == 200
    items = pending.json()
    assert len(items) == 1
    assert items[0]["student_name"] == "Cleo Student"
    assert items[0]["answers"] == {"e1": "An essay"}

    graded = await client.patch(
        f"/teacher/quiz-attempt/grade-attempt/{quiz_id}/{attempt['attempt_id']}",
        json={"score": 85, "comment": "Nice"},
        headers=headers.teacher,
    )
    assert graded.status_code == 200, graded.text
    assert graded.json()["status"] == "completed"
    assert graded.json()["score"] == 85

    assert (await client.get(f"/teacher/quiz-attempt/list-attempts/{quiz_id}", headers=headers.teacher)).json() == []
    completed = (await client.get(
        f"/teacher/quiz-attempt/list-attempts/{quiz_id}",
        params={"status": "completed"},
        headers=headers.teacher,
    )).json()
    assert [a["score"] for a in completed] == [85]


async def test_grading_is_owner_only(client, headers):
    created = await create_quiz(client, headers)
    attempt = (await client.post(f"/student/quiz-attempt/start-attempt/{created['id']}", headers=headers.student)).json()

    response = await client.patch(
        f"/teacher/quiz-attempt/grade-attempt/{created['id']}/{attempt['attempt_id']}",
        json={"score": 100},
        headers=headers.other_teacher,
    )
    assert response.status_code == 403

    response = await client.get(f"/teacher/quiz-attempt/list-attempts/{created['id']}", headers=headers.other_teacher)
    assert response.status_code == 403
