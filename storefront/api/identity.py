# storefront/api/identity.py
import uuid

from fastapi import Depends, HTTPException, Request, Response, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from storefront.data.database import get_db
from storefront.data.models.user import UserModel
from storefront.domain.policies import CatalogPolicy
from storefront.domain.scope import CartScope
from storefront.services.user_service import UserService
from storefront.utils.settings import SESSION_COOKIE_NAME
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

oauth2_scheme_optional = OAuth2PasswordBearer(tokenUrl="users/login", auto_error=False)
catalog_policy = CatalogPolicy()


def _credentials_exception() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_session_id(request: Request, response: Response) -> str:
    """Id sesji przegladarki (klucz koszyka goscia). Nowa sesja dostaje cookie."""
    session_id = request.cookies.get(SESSION_COOKIE_NAME)
    if not session_id:
        session_id = uuid.uuid4().hex
        response.set_cookie(SESSION_COOKIE_NAME, session_id, httponly=True, samesite="lax")
    return session_id


def get_current_user_optional(
    token: str | None = Depends(oauth2_scheme_optional),
    db: Session = Depends(get_db),
) -> UserModel | None:
    if not token:
        return None
    #zly/wygasly token to blad, nie cichy fallback na goscia
    try:
        return UserService(db).get_user_from_token(token)
    except PermissionError:
        raise _credentials_exception()


def get_current_user(user: UserModel | None = Depends(get_current_user_optional)) -> UserModel:
    if user is None:
        raise _credentials_exception()
    return user


def require_admin(user: UserModel = Depends(get_current_user)) -> UserModel:
    if not catalog_policy.manage(user):
        logger.warning(f"Proba dostepu do panelu katalogu bez uprawnien: user_id={user.id}")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return user


def get_scope(
    session_id: str = Depends(get_session_id),
    user: UserModel | None = Depends(get_current_user_optional),
) -> CartScope:
    if user is None:
        return CartScope.for_guest(session_id)
    return CartScope.for_user(user.id)
