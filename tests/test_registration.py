"""
Машина состояний регистрации: submit / approve / reject / activate.
"""

import pytest

from app.core.config import Settings
from app.core.errors import DuplicatePhone, DuplicateRequest, NotFound, ValidationError
from app.models.user import RoleEnum, User
from app.schemas.user import RegisterIn
from app.services import registration
from app.services.registration import resolve_role
from conftest import registration_payload

pytestmark = pytest.mark.unit


def _candidate(**overrides) -> RegisterIn:
    return RegisterIn(**registration_payload(**overrides))


def _count(db) -> int:
    return db.query(User).count()


def test_submit_creates_single_pending_record(repo, settings, db):
    user = registration.submit(repo, settings, _candidate())

    assert _count(db) == 1
    assert user.role == RoleEnum.user
    assert user.pending_approval is True
    assert user.approved is False
    assert user.is_active is True
    assert user.hashed_password != registration_payload()["password"]


def test_submit_with_admin_secret_creates_active_admin(repo, settings, db):
    user = registration.submit(
        repo, settings, _candidate(role="admin", secret_key="test-admin-secret")
    )

    assert _count(db) == 1
    assert user.role == RoleEnum.admin
    assert user.approved is True
    assert user.pending_approval is False
    assert user.is_active is True


def test_admin_role_without_correct_secret_is_silently_downgraded(repo, settings):
    user = registration.submit(repo, settings, _candidate(role="admin", secret_key="guess"))

    assert user.role == RoleEnum.user
    assert user.pending_approval is True


def test_client_asserted_role_alone_is_not_trusted(repo, settings):
    user = registration.submit(repo, settings, _candidate(role="admin"))
    assert user.role == RoleEnum.user


def test_admin_secret_unset_never_grants_admin(monkeypatch):
    monkeypatch.setenv("ADMIN_SECRET", "")
    settings = Settings()
    assert resolve_role("admin", "", settings) == RoleEnum.user
    assert resolve_role("admin", "anything", settings) == RoleEnum.user


def test_explicit_user_role_with_secret_stays_user(settings):
    assert resolve_role("user", "test-admin-secret", settings) == RoleEnum.user
    assert resolve_role(None, "test-admin-secret", settings) == RoleEnum.admin


@pytest.mark.parametrize(
    "field",
    ["first_name", "last_name", "phone", "password", "birth_date", "country", "nationality"],
)
def test_missing_required_field_is_validation_error(repo, settings, db, field):
    with pytest.raises(ValidationError):
        registration.submit(repo, settings, _candidate(**{field: None}))
    assert _count(db) == 0


def test_blank_required_field_is_validation_error(repo, settings):
    with pytest.raises(ValidationError):
        registration.submit(repo, settings, _candidate(country="   "))


@pytest.mark.parametrize(
    "phone",
    [
        "22670000001",
        "+12345",
        "+1234567890123456",
        "+226 7000 0001",
        "+2267000000a",
        "++22670000001",
        "+22670000001\n",
        "+٢٢٦٧٠٠٠٠٠٠١",
    ],
)
def test_invalid_phone_format_is_validation_error(repo, settings, db, phone):
    with pytest.raises(ValidationError):
        registration.submit(repo, settings, _candidate(phone=phone))
    assert _count(db) == 0


@pytest.mark.parametrize("phone", ["+123456", "+123456789012345"])
def test_phone_length_bounds_accepted(repo, settings, phone):
    assert registration.submit(repo, settings, _candidate(phone=phone)).phone == phone


def test_duplicate_of_active_user_is_duplicate_phone(repo, settings, db, make_user):
    make_user(phone="+22670000001", approved=True)

    with pytest.raises(DuplicatePhone):
        registration.submit(repo, settings, _candidate(phone="+22670000001"))
    assert _count(db) == 1


def test_duplicate_of_pending_request_is_duplicate_request(repo, settings, db):
    registration.submit(repo, settings, _candidate())

    with pytest.raises(DuplicateRequest):
        registration.submit(repo, settings, _candidate())
    assert _count(db) == 1


def test_admin_scenario_then_resubmit_is_duplicate_phone(repo, settings, db):
    admin = registration.submit(
        repo, settings, _candidate(phone="+22670000001", role="admin", secret_key="test-admin-secret")
    )
    assert admin.role == RoleEnum.admin and admin.approved

    with pytest.raises(DuplicatePhone):
        registration.submit(
            repo, settings, _candidate(phone="+22670000001", role="admin", secret_key="test-admin-secret")
        )
    assert _count(db) == 1


def test_storage_unique_constraint_is_the_authority(repo, settings, db, monkeypatch):
    registration.submit(repo, settings, _candidate())
    approved = registration.approve(repo, db.query(User).one().id)
    assert approved.approved

    # Проверка приложения "проиграла гонку": запись уже есть, а поиск её не видит
    monkeypatch.setattr(repo, "find_by_phone", lambda phone: None)
    with pytest.raises(DuplicatePhone):
        registration.submit(repo, settings, _candidate())
    assert _count(db) == 1


def test_approve_moves_request_to_active(repo, settings):
    user = registration.submit(repo, settings, _candidate())

    approved = registration.approve(repo, user.id)

    assert approved.approved is True
    assert approved.pending_approval is False
    assert approved.is_active is True


def test_approve_twice_does_not_duplicate(repo, settings, db):
    user = registration.submit(repo, settings, _candidate())
    registration.approve(repo, user.id)

    with pytest.raises(NotFound):
        registration.approve(repo, user.id)
    assert _count(db) == 1


def test_approve_unknown_id_is_not_found(repo):
    with pytest.raises(NotFound):
        registration.approve(repo, 12345)


def test_reject_removes_request_and_frees_phone(repo, settings, db):
    user = registration.submit(repo, settings, _candidate())

    registration.reject(repo, user.id)
    assert _count(db) == 0

    again = registration.submit(repo, settings, _candidate())
    assert again.pending_approval is True


def test_reject_active_user_is_not_found(repo, settings, db, make_user):
    user = make_user(approved=True)

    with pytest.raises(NotFound):
        registration.reject(repo, user.id)
    assert _count(db) == 1


def test_list_pending_only_returns_requests(repo, settings, make_user):
    make_user(phone="+22670000009", approved=True)
    first = registration.submit(repo, settings, _candidate(phone="+22670000001"))
    second = registration.submit(repo, settings, _candidate(phone="+22670000002"))

    pending = registration.list_pending(repo)

    assert [u.id for u in pending] == [first.id, second.id]


def test_deactivate_is_independent_of_approval(repo, settings):
    user = registration.submit(repo, settings, _candidate())
    registration.approve(repo, user.id)

    user = registration.set_active(repo, user.id, False)
    assert user.is_active is False
    assert user.approved is True
    assert user.pending_approval is False

    user = registration.set_active(repo, user.id, True)
    assert user.is_active is True


def test_set_active_unknown_user_is_not_found(repo):
    with pytest.raises(NotFound):
        registration.set_active(repo, 999, False)
