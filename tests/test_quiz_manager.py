import pytest
from sqlalchemy.exc import OperationalError

from conftest import build_quiz
from core.database import SessionLocal
from core.exceptions import NotFoundError, StorageError, ValidationError
from models.quiz import OptionModel, QuestionModel, QuizModel, QuizStatus
from schemas.quiz import OptionInput, QuestionInput
from utils.quiz_manager import QuizManager


@pytest.fixture
def author(make_user):
    return make_user()


@pytest.fixture
def admin(make_user):
    return make_user(role="admin")


def test_submit_then_pending_round_trip(db, author, quiz_payload):
    manager = QuizManager(db)
    payload = quiz_payload(question_count=3)

    created = manager.submit_quiz(payload, author.user_id)
    pending = manager.get_pending_quizzes()

    assert [q.quiz_id for q in pending] == [created.quiz_id]
    quiz = pending[0]
    assert quiz.status == QuizStatus.PENDING
    assert quiz.created_by == author.user_id
    assert quiz.reviewed_by is None
    assert [q.prompt for q in quiz.questions] == [q.prompt for q in payload.questions]
    for stored, sent in zip(quiz.questions, payload.questions):
        assert [(o.label, o.is_correct) for o in stored.options] == [
            (o.label, o.is_correct) for o in sent.options
        ]


def test_pending_quiz_is_hidden_from_public(db, author, quiz_payload):
    manager = QuizManager(db)
    created = manager.submit_quiz(quiz_payload(), author.user_id)

    assert manager.get_quizzes() == []
    assert manager.get_quiz_by_id(created.quiz_id) is None


def test_approve_makes_quiz_public(db, author, admin, quiz_payload, clock):
    manager = QuizManager(db, clock)
    created = manager.submit_quiz(quiz_payload(), author.user_id)

    manager.approve_pending_quiz(created.quiz_id, admin.user_id)

    quiz = manager.get_quiz_by_id(created.quiz_id)
    assert quiz.status == QuizStatus.APPROVED
    assert quiz.reviewed_by == admin.user_id
    assert quiz.reviewed_at == clock().isoformat()
    assert [q.quiz_id for q in manager.get_quizzes()] == [created.quiz_id]
    assert manager.get_pending_quizzes() == []


def test_already_approved_quiz_cannot_be_moderated_again(engine, db, author, admin, quiz_payload):
    created = QuizManager(db).submit_quiz(quiz_payload(), author.user_id)

    first_db, second_db = SessionLocal(), SessionLocal()
    try:
        first, second = QuizManager(first_db), QuizManager(second_db)
        first.approve_pending_quiz(created.quiz_id, admin.user_id)
        with pytest.raises(NotFoundError):
            second.approve_pending_quiz(created.quiz_id, admin.user_id)
        with pytest.raises(NotFoundError):
            second.reject_pending_quiz(created.quiz_id, admin.user_id, "too late")
    finally:
        first_db.close()
        second_db.close()

    assert QuizManager(db).get_quiz_by_id(created.quiz_id) is not None


def test_reject_records_reason(db, author, admin, quiz_payload):
    manager = QuizManager(db)
    created = manager.submit_quiz(quiz_payload(), author.user_id)

    manager.reject_pending_quiz(created.quiz_id, admin.user_id, "  Duplicate quiz. ")

    submissions = manager.get_user_submissions(author.user_id)
    assert len(submissions) == 1
    assert submissions[0].status == QuizStatus.REJECTED
    assert submissions[0].rejection_reason == "Duplicate quiz."
    assert submissions[0].reviewed_by == admin.user_id
    assert manager.get_quiz_by_id(created.quiz_id) is None


@pytest.mark.parametrize("reason", ["", "   ", "r" * 201])
def test_reject_requires_valid_reason(db, author, admin, quiz_payload, reason):
    manager = QuizManager(db)
    created = manager.submit_quiz(quiz_payload(), author.user_id)

    with pytest.raises(ValidationError):
        manager.reject_pending_quiz(created.quiz_id, admin.user_id, reason)
    assert [q.quiz_id for q in manager.get_pending_quizzes()] == [created.quiz_id]


def test_rejected_quiz_is_terminal(db, author, admin, quiz_payload):
    manager = QuizManager(db)
    created = manager.submit_quiz(quiz_payload(), author.user_id)
    manager.reject_pending_quiz(created.quiz_id, admin.user_id, "Off topic.")

    with pytest.raises(NotFoundError):
        manager.approve_pending_quiz(created.quiz_id, admin.user_id)
    with pytest.raises(NotFoundError):
        manager.update_pending_quiz(created.quiz_id, quiz_payload())


def test_approval_clears_previous_rejection_reason(db, author, admin, quiz_payload):
    manager = QuizManager(db)
    created = manager.submit_quiz(quiz_payload(), author.user_id)
    db.query(QuizModel).filter(QuizModel.quiz_id == created.quiz_id).update(
        {QuizModel.rejection_reason: "stale"}
    )
    db.commit()

    manager.approve_pending_quiz(created.quiz_id, admin.user_id)
    assert manager.get_quiz_by_id(created.quiz_id).rejection_reason is None


def _with_correct_count(payload, count):
    question = payload.questions[0]
    question.options = [
        OptionInput(label=f"opt {i}", is_correct=i < count) for i in range(4)
    ]
    return payload


@pytest.mark.parametrize("correct", [0, 2, 4])
def test_correct_option_count_is_enforced_everywhere(
    db, author, admin, quiz_payload, correct
):
    manager = QuizManager(db)
    pending = manager.submit_quiz(quiz_payload(), author.user_id)

    with pytest.raises(ValidationError):
        manager.submit_quiz(_with_correct_count(quiz_payload(), correct), author.user_id)
    with pytest.raises(ValidationError):
        manager.create_quiz_as_admin(_with_correct_count(quiz_payload(), correct), admin.user_id)
    with pytest.raises(ValidationError):
        manager.update_pending_quiz(pending.quiz_id, _with_correct_count(quiz_payload(), correct))

    assert db.query(QuizModel).count() == 1


@pytest.mark.parametrize(
    "mutate",
    [
        lambda p: setattr(p, "title", ""),
        lambda p: setattr(p, "title", "t" * 121),
        lambda p: setattr(p, "description", "d" * 501),
        lambda p: setattr(p, "questions", []),
        lambda p: setattr(p, "questions", p.questions * 11),
        lambda p: setattr(p.questions[0], "options", p.questions[0].options[:1]),
        lambda p: setattr(
            p.questions[0],
            "options",
            [OptionInput(label=str(i), is_correct=i == 0) for i in range(7)],
        ),
        lambda p: setattr(p.questions[0], "prompt", "  "),
        lambda p: setattr(p.questions[0].options[1], "label", ""),
    ],
)
def test_submit_validation(db, author, quiz_payload, mutate):
    payload = quiz_payload()
    mutate(payload)
    with pytest.raises(ValidationError):
        QuizManager(db).submit_quiz(payload, author.user_id)
    assert db.query(QuizModel).count() == 0


def test_submit_accepts_limits(db, author, quiz_payload):
    payload = quiz_payload(question_count=20)
    payload.questions[0].options = [
        OptionInput(label=str(i), is_correct=i == 5) for i in range(6)
    ]
    payload.description = None

    quiz = QuizManager(db).submit_quiz(payload, author.user_id)
    assert len(quiz.questions) == 20
    assert len(quiz.questions[0].options) == 6
    assert quiz.description == ""


def test_submit_requires_existing_category(db, author):
    with pytest.raises(ValidationError):
        QuizManager(db).submit_quiz(build_quiz("no-such-category"), author.user_id)
    assert db.query(QuizModel).count() == 0


def test_failed_insert_rolls_back_whole_aggregate(db, author, quiz_payload, monkeypatch):
    original = QuizManager._attach_questions

    def attach_then_fail(self, model, questions):
        original(self, model, questions[:1])
        raise OperationalError("INSERT INTO options", {}, Exception("disk I/O error"))

    monkeypatch.setattr(QuizManager, "_attach_questions", attach_then_fail)

    with pytest.raises(StorageError):
        QuizManager(db).submit_quiz(quiz_payload(question_count=3), author.user_id)

    assert db.query(QuizModel).count() == 0
    assert db.query(QuestionModel).count() == 0
    assert db.query(OptionModel).count() == 0


def test_update_replaces_questions_and_positions(db, author, quiz_payload, category):
    manager = QuizManager(db)
    created = manager.submit_quiz(quiz_payload(question_count=2), author.user_id)
    old_question_ids = {q.question_id for q in created.questions}

    edited = quiz_payload(question_count=3, title="OWASP basics, revised")
    edited.questions.reverse()
    edited.questions[0].options.reverse()
    manager.update_pending_quiz(created.quiz_id, edited)

    quiz = manager.get_submission_by_id(created.quiz_id)
    assert quiz.title == "OWASP basics, revised"
    assert quiz.status == QuizStatus.PENDING
    assert [q.prompt for q in quiz.questions] == ["Question 2?", "Question 1?", "Question 0?"]
    assert [o.label for o in quiz.questions[0].options] == [
        "Q2 also wrong",
        "Q2 wrong",
        "Q2 right",
    ]
    assert not old_question_ids & {q.question_id for q in quiz.questions}

    positions = [
        row.position
        for row in db.query(QuestionModel)
        .filter(QuestionModel.quiz_id == created.quiz_id)
        .order_by(QuestionModel.position)
    ]
    assert positions == [0, 1, 2]
    assert db.query(QuestionModel).count() == 3
    assert db.query(OptionModel).count() == 9


def test_update_of_approved_quiz_is_not_found(db, author, admin, quiz_payload):
    manager = QuizManager(db)
    created = manager.submit_quiz(quiz_payload(), author.user_id)
    manager.approve_pending_quiz(created.quiz_id, admin.user_id)

    with pytest.raises(NotFoundError):
        manager.update_pending_quiz(created.quiz_id, quiz_payload(title="Changed"))
    assert manager.get_quiz_by_id(created.quiz_id).title == "OWASP basics"


def test_update_missing_quiz(db, quiz_payload):
    with pytest.raises(NotFoundError):
        QuizManager(db).update_pending_quiz("missing", quiz_payload())


def test_create_quiz_as_admin_is_approved(db, admin, quiz_payload, clock):
    quiz = QuizManager(db, clock).create_quiz_as_admin(quiz_payload(), admin.user_id)

    assert quiz.status == QuizStatus.APPROVED
    assert quiz.reviewed_by == admin.user_id
    assert quiz.reviewed_at == clock().isoformat()
    assert QuizManager(db).get_pending_quizzes() == []


def test_delete_quiz_cascades(db, author, quiz_payload):
    manager = QuizManager(db)
    created = manager.submit_quiz(quiz_payload(question_count=2), author.user_id)

    manager.delete_quiz(created.quiz_id)

    assert db.query(QuizModel).count() == 0
    assert db.query(QuestionModel).count() == 0
    assert db.query(OptionModel).count() == 0
    with pytest.raises(NotFoundError):
        manager.delete_quiz(created.quiz_id)


def test_user_submissions_only_show_own_unapproved(db, author, admin, make_user, quiz_payload, clock):
    manager = QuizManager(db, clock)
    other = make_user()
    approved = manager.submit_quiz(quiz_payload(title="Approved"), author.user_id)
    manager.approve_pending_quiz(approved.quiz_id, admin.user_id)
    clock.advance(minutes=1)
    older = manager.submit_quiz(quiz_payload(title="Older"), author.user_id)
    clock.advance(minutes=1)
    newer = manager.submit_quiz(quiz_payload(title="Newer"), author.user_id)
    manager.submit_quiz(quiz_payload(title="Not mine"), other.user_id)

    submissions = manager.get_user_submissions(author.user_id)
    assert [q.quiz_id for q in submissions] == [newer.quiz_id, older.quiz_id]


def test_option_positions_follow_input_order(db, author, quiz_payload):
    payload = quiz_payload(question_count=1)
    payload.questions = [
        QuestionInput(
            prompt="Which port does HTTPS use?",
            options=[
                OptionInput(label="80"),
                OptionInput(label="443", is_correct=True),
                OptionInput(label="22"),
            ],
        )
    ]
    quiz = QuizManager(db).submit_quiz(payload, author.user_id)

    rows = (
        db.query(OptionModel)
        .order_by(OptionModel.position)
        .all()
    )
    assert [(r.label, r.position) for r in rows] == [("80", 0), ("443", 1), ("22", 2)]
    assert [o.label for o in quiz.questions[0].options] == ["80", "443", "22"]
