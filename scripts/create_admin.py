# scripts/create_admin.py
# Создаёт администратора или сбрасывает ему пароль и статус.
# Использование: python -m scripts.create_admin +22670000000 "password" [Имя] [Фамилия]
import sys

from app.core.security import get_password_hash
from app.db.base import Base
from app.db.session import SessionLocal, engine
from app.models.user import RoleEnum, User
from app.repositories.users import UserRepository

import app.models.course  # noqa: F401
import app.models.result  # noqa: F401
import app.models.payment  # noqa: F401


def create_admin(phone: str, password: str, first_name: str = "Admin", last_name: str = "Admin") -> User:
    Base.metadata.create_all(bind=engine)
    with SessionLocal() as db:
        repo = UserRepository(db)
        fields = dict(
            hashed_password=get_password_hash(password),
            role=RoleEnum.admin,
            is_active=True,
            approved=True,
            pending_approval=False,
        )
        user = repo.find_by_phone(phone)
        if user:
            print(f"User '{phone}' already exists, resetting password and promoting to admin.")
            return repo.update(user, **fields)
        print(f"Creating admin '{phone}'.")
        return repo.insert(phone=phone, first_name=first_name, last_name=last_name, **fields)


def main():
    if len(sys.argv) < 3:
        print("Usage: python -m scripts.create_admin <phone> <password> [first_name] [last_name]")
        sys.exit(1)
    user = create_admin(*sys.argv[1:5])
    print(f"Admin ready: id={user.id}")


if __name__ == "__main__":
    main()
