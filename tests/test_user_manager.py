import bcrypt
import pytest

from conftest import PASSWORD
from core.exceptions import (
    ConflictError,
    InvalidCredentialsError,
    NotFoundError,
    ValidationError,
)
from models.user import UserModel
from utils import credentials
from utils.quiz_manager import QuizManager
from utils.user_manager import UserManager


def test_create_user_normalizes_fields(db):
    user = UserManager(db).create_user("  Alice@Example.COM ", "Alice_01", PASSWORD)

    assert user.email == "alice@example.com"
    assert user.username == "Alice_01"
    assert user.display_name == "Alice_01"
    assert user.role == "user"

    stored = db.query(UserModel).filter(UserModel.user_id == user.user_id).one()
    assert stored.password_algo == "scrypt"
    assert PASSWORD not in stored.password_hash


@pytest.mark.parametrize(
    "email, username, password",
    [
        ("not-an-email", "alice", PASSWORD),
        ("alice@example.com", "has space", PASSWORD),
        ("alice@example.com", "x" * 25, PASSWORD),
        ("alice@example.com", "alice", "short"),
        ("", "alice", PASSWORD),
    ],
)
def test_create_user_rejects_invalid_input(db, email, username, password):
    with pytest.raises(ValidationError):
        UserManager(db).create_user(email, username, password)
    assert db.query(UserModel).count() == 0


def test_email_and_username_are_unique_ignoring_case(db):
    manager = UserManager(db)
    manager.create_user("alice@example.com", "alice", PASSWORD)

    with pytest.raises(ConflictError):
        manager.create_user("ALICE@example.com", "someone", PASSWORD)
    with pytest.raises(ConflictError):
        manager.create_user("other@example.com", "ALICE", PASSWORD)


def test_create_user_as_admin_rejects_unknown_role(db):
    with pytest.raises(ValidationError):
        UserManager(db).create_user_as_admin(
            "root@example.com", "root", PASSWORD, role="superuser"
        )


def test_verify_user_by_email_or_username(db):
    manager = UserManager(db)
    created = manager.create_user("alice@example.com", "Alice", PASSWORD)

    assert manager.verify_user("ALICE@example.com", PASSWORD).user_id == created.user_id
    assert manager.verify_user("alice", PASSWORD).user_id == created.user_id


@pytest.mark.parametrize(
    "identifier, password",
    [("alice", "wrong-password"), ("nobody", PASSWORD), ("", PASSWORD), ("alice", "")],
)
def test_verify_user_failures_look_identical(db, identifier, password):
    manager = UserManager(db)
    manager.create_user("alice@example.com", "alice", PASSWORD)

    with pytest.raises(InvalidCredentialsError) as excinfo:
        manager.verify_user(identifier, password)
    assert excinfo.value.message == "Invalid credentials."


def test_legacy_bcrypt_credential_is_upgraded_on_sign_in(db):
    manager = UserManager(db)
    user = manager.create_user("legacy@example.com", "legacy", PASSWORD)
    stored = db.query(UserModel).filter(UserModel.user_id == user.user_id).one()
    stored.password_algo = "bcrypt"
    stored.salt = ""
    stored.password_hash = bcrypt.hashpw(
        PASSWORD.encode("utf-8"), bcrypt.gensalt(rounds=4)
    ).decode("utf-8")
    db.commit()

    assert manager.verify_user("legacy", PASSWORD).user_id == user.user_id

    db.refresh(stored)
    assert stored.password_algo == "scrypt"
    assert stored.salt
    assert manager.verify_user("legacy", PASSWORD).user_id == user.user_id


def test_get_users_lists_everyone(db, make_user):
    make_user()
    make_user(role="admin")
    assert len(UserManager(db).get_users()) == 2


def test_delete_user(db, make_user):
    admin = make_user(role="admin")
    player = make_user()
    manager = UserManager(db)

    manager.delete_user(player.user_id, requester_id=admin.user_id)
    assert manager.get_user_by_id(player.user_id) is None


def test_delete_own_account_is_rejected(db, make_user):
    admin = make_user(role="admin")
    with pytest.raises(ValidationError):
        UserManager(db).delete_user(admin.user_id, requester_id=admin.user_id)


def test_last_admin_cannot_be_deleted(db, make_user):
    admin = make_user(role="admin")
    player = make_user()

    with pytest.raises(ConflictError):
        UserManager(db).delete_user(admin.user_id, requester_id=player.user_id)
    assert UserManager(db).get_user_by_id(admin.user_id) is not None


def test_admin_can_be_deleted_while_another_remains(db, make_user):
    first = make_user(role="admin")
    second = make_user(role="admin")

    UserManager(db).delete_user(first.user_id, requester_id=second.user_id)
    assert UserManager(db).get_user_by_id(first.user_id) is None


def test_delete_missing_user(db, make_user):
    admin = make_user(role="admin")
    with pytest.raises(NotFoundError):
        UserManager(db).delete_user("missing", requester_id=admin.user_id)


def test_user_with_quizzes_cannot_be_deleted(db, make_user, quiz_payload):
    admin = make_user(role="admin")
    author = make_user()
    QuizManager(db).submit_quiz(quiz_payload(), author.user_id)

    with pytest.raises(ConflictError):
        UserManager(db).delete_user(author.user_id, requester_id=admin.user_id)


@pytest.mark.parametrize("identifier", ["alice", "nobody"])
def test_failed_sign_in_costs_one_hash_either_way(db, monkeypatch, identifier):
    manager = UserManager(db)
    manager.create_user("alice@example.com", "alice", PASSWORD)

    calls = []
    original = credentials.hash_password

    def counting_hash(password, salt):
        calls.append(salt)
        return original(password, salt)

    monkeypatch.setattr(credentials, "hash_password", counting_hash)

    with pytest.raises(InvalidCredentialsError):
        manager.verify_user(identifier, "wrong-password")
    assert len(calls) == 1


def test_admin_deletion_that_would_leave_no_admin_keeps_the_row(db, make_user):
    admin = make_user(role="admin")
    player = make_user()

    with pytest.raises(ConflictError) as excinfo:
        UserManager(db).delete_user(admin.user_id, requester_id=player.user_id)
    assert excinfo.value.message == "Cannot delete the last admin."
    assert db.query(UserModel).filter(UserModel.role == "admin").count() == 1
