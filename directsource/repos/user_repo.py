# directsource/repos/user_repo.py
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from directsource.data.models.user import UserModel


class UserRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: str) -> UserModel | None:
        return self.db.get(UserModel, user_id)

    def get_by_email(self, email: str) -> UserModel | None:
        # porownanie bez wielkosci liter, starsze wpisy moga miec wielkie litery
        stmt = select(UserModel).where(func.lower(UserModel.email) == email.lower())
        return self.db.execute(stmt).scalars().first()

    def create_user(self, user: UserModel) -> UserModel:
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def rollback(self):
        self.db.rollback()
