from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from storefront.api.identity import get_current_user, get_session_id
from storefront.data.database import get_db
from storefront.data.models.user import UserModel
from storefront.services.cart_service import CartService
from storefront.services.user_service import UserService
from storefront.domain.schemas import TokenOut, UserCreate, UserLogin, UserRead, UserUpdate
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


def _transfer_guest_cart(db: Session, session_id: str, user_id: int):
    #blad przepiecia koszyka nie moze zablokowac logowania/rejestracji
    try:
        CartService(db).transfer_guest_cart(session_id, user_id)
    except Exception as e:
        db.rollback()
        logger.warning(
            f"Nie udalo sie przepiac koszyka goscia: user_id={user_id}, "
            f"session_id={session_id}, error={e}"
        )


def _token_out(service: UserService, user: UserModel) -> TokenOut:
    return TokenOut(access_token=service.create_access_token(user), user=UserRead.model_validate(user))


def _ensure_self(current_user: UserModel, user_id: int):
    if current_user.id != user_id:
        raise HTTPException(status_code=403, detail="Not allowed to access this profile")


@router.post("/", response_model=TokenOut, status_code=201)
def register(
    payload: UserCreate,
    session_id: str = Depends(get_session_id),
    db: Session = Depends(get_db),
):
    service = UserService(db)
    try:
        user = service.register(payload)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    _transfer_guest_cart(db, session_id, user.id)
    return _token_out(service, user)


@router.post("/login", response_model=TokenOut)
def login(
    payload: UserLogin,
    session_id: str = Depends(get_session_id),
    db: Session = Depends(get_db),
):
    service = UserService(db)
    try:
        user = service.authenticate(payload)
    except PermissionError as e:
        raise HTTPException(status_code=401, detail=str(e), headers={"WWW-Authenticate": "Bearer"})

    _transfer_guest_cart(db, session_id, user.id)
    return _token_out(service, user)


@router.get("/me", response_model=UserRead)
def me(current_user: UserModel = Depends(get_current_user)):
    return current_user


@router.get("/{user_id}", response_model=UserRead)
def get_user(
    user_id: int,
    current_user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    _ensure_self(current_user, user_id)
    service = UserService(db)
    try:
        return service.get_user(user_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.patch("/{user_id}", response_model=UserRead)
def update_user(
    user_id: int,
    payload: UserUpdate,
    current_user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    _ensure_self(current_user, user_id)
    service = UserService(db)
    try:
        return service.update_profile(user_id, payload)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
