# directsource/api/routers/users.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from directsource.data.database import get_db
from directsource.domain.schemas import UserCreate, UserRead
from directsource.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"])


def get_service(db: Session = Depends(get_db)) -> UserService:
    return UserService(db)


@router.post("/", response_model=UserRead)
def create_user(payload: UserCreate, svc: UserService = Depends(get_service)):
    """
    Rejestruje konto po logowaniu. Ponowne wywolanie z tym samym id zwraca istniejace konto.
    """
    try:
        return svc.create_user(payload)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.get("/{user_id}", response_model=UserRead)
def get_user(user_id: str, svc: UserService = Depends(get_service)):
    try:
        return svc.get_user(user_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
