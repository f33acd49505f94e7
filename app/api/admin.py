# app/api/admin.py
# Роуты администратора: заявки на регистрацию и блокировка пользователей.
import logging

from fastapi import APIRouter, Depends

from app.api.deps import get_user_repo
from app.core.security import Identity, require_admin
from app.repositories.users import UserRepository
from app.schemas.user import MessageOut, RegisterOut, RequestListOut, UserListOut
from app.services import registration

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin")


@router.get("/register-requests", response_model=RequestListOut)
def list_register_requests(
    admin: Identity = Depends(require_admin),
    repo: UserRepository = Depends(get_user_repo),
):
    return {"requests": registration.list_pending(repo)}


@router.post("/register-requests/{request_id}/approve", response_model=RegisterOut)
def approve_register_request(
    request_id: int,
    admin: Identity = Depends(require_admin),
    repo: UserRepository = Depends(get_user_repo),
):
    user = registration.approve(repo, request_id)
    logger.info(f"Admin id={admin.id} approved request id={request_id}")
    return {"message": "User approved", "user": user}


@router.post("/register-requests/{request_id}/reject", response_model=MessageOut)
def reject_register_request(
    request_id: int,
    admin: Identity = Depends(require_admin),
    repo: UserRepository = Depends(get_user_repo),
):
    registration.reject(repo, request_id)
    logger.info(f"Admin id={admin.id} rejected request id={request_id}")
    return {"message": "Request rejected"}


@router.get("/users", response_model=UserListOut)
def list_users(
    admin: Identity = Depends(require_admin),
    repo: UserRepository = Depends(get_user_repo),
):
    return {"users": repo.list_all()}


@router.post("/users/{user_id}/activate", response_model=RegisterOut)
def activate_user(
    user_id: int,
    admin: Identity = Depends(require_admin),
    repo: UserRepository = Depends(get_user_repo),
):
    user = registration.set_active(repo, user_id, True)
    return {"message": "User activated", "user": user}


@router.post("/users/{user_id}/deactivate", response_model=RegisterOut)
def deactivate_user(
    user_id: int,
    admin: Identity = Depends(require_admin),
    repo: UserRepository = Depends(get_user_repo),
):
    user = registration.set_active(repo, user_id, False)
    return {"message": "User deactivated", "user": user}
