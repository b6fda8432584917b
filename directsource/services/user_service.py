# directsource/services/user_service.py
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from directsource.data.models.user import UserModel
from directsource.domain.schemas import UserCreate, UserRead
from directsource.repos.manufacturer_repo import ManufacturerRepo
from directsource.repos.user_repo import UserRepo
from directsource.utils.logging import get_logger

logger = get_logger(__name__)


class UserService:
    """
    Konta klientow i producentow.
    Tworzenie jest idempotentne po id (wywolywane po kazdym logowaniu),
    email jest unikalny bez wzgledu na wielkosc liter.
    """

    def __init__(self, db: Session):
        self.repo = UserRepo(db)
        self.manufacturer_repo = ManufacturerRepo(db)

    def create_user(self, payload: UserCreate) -> UserRead:
        existing = self.repo.get_user(payload.id)
        if existing:
            return self._to_read(existing)

        email = payload.email.strip().lower() if payload.email else None
        if email:
            owner = self.repo.get_by_email(email)
            if owner is not None:
                raise ValueError(f"Email {email} jest juz uzywany przez inne konto")

        user = UserModel(id=payload.id, name=payload.name, email=email, role=payload.role)
        try:
            created = self.repo.create_user(user)
        except IntegrityError as e:
            self.repo.rollback()
            raise ValueError(f"Nie mozna utworzyc uzytkownika {payload.id}") from e

        logger.info(f"Created {created.role} account {created.id}")
        return self._to_read(created)

    def get_user(self, user_id: str) -> UserRead:
        user = self.repo.get_user(user_id)
        if not user:
            raise LookupError("Uzytkownik nie istnieje")
        return self._to_read(user)

    def _to_read(self, user: UserModel) -> UserRead:
        read = UserRead.model_validate(user)
        if user.role == "manufacturer":
            manufacturer = self.manufacturer_repo.get_by_owner(user.id)
            read.manufacturer_id = manufacturer.id if manufacturer else None
        return read
