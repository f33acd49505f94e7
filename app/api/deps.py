# app/api/deps.py
# Общие зависимости роутеров.
from fastapi import Depends
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.repositories.users import UserRepository


def get_user_repo(db: Session = Depends(get_db)) -> UserRepository:
    return UserRepository(db)
