from datetime import datetime, timedelta, timezone

from jose import jwt, JWTError
from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.data.models.user import UserModel
from storefront.repos.user_repo import UserRepo
from storefront.domain.schemas import UserCreate, UserLogin, UserRead, UserUpdate
from storefront.utils.settings import SECRET_KEY, ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


class UserService:
    def __init__(self, db: Session):
        self.repo = UserRepo(db)

    def register(self, payload: UserCreate) -> UserModel:
        if self.repo.get_user_by_email(payload.email):
            raise ValueError("Email already registered")

        user = UserModel(
            name=payload.name,
            email=payload.email,
            password_hash=pwd_context.hash(payload.password),
        )
        try:
            created = self.repo.create_user(user)
        except IntegrityError:
            self.repo.rollback()
            raise ValueError("Email already registered")

        logger.info(f"Zarejestrowano uzytkownika {created.id}")
        return created

    def authenticate(self, payload: UserLogin) -> UserModel:
        user = self.repo.get_user_by_email(payload.email)
        if not user or not pwd_context.verify(payload.password, user.password_hash):
            raise PermissionError("Invalid email or password")
        return user

    def create_access_token(self, user: UserModel, expires_delta: timedelta | None = None) -> str:
        expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
        #sub w JWT musi byc stringiem
        return jwt.encode({"sub": str(user.id), "exp": expire}, SECRET_KEY, algorithm=ALGORITHM)

    def get_user_from_token(self, token: str) -> UserModel:
        try:
            payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
            subject = payload.get("sub")
            user_id = int(subject) if subject is not None else None
        except (JWTError, ValueError):
            raise PermissionError("Could not validate credentials")

        user = self.repo.get_user(user_id) if user_id else None
        if not user:
            raise PermissionError("Could not validate credentials")
        return user

    def get_user(self, user_id: int) -> UserRead:
        user = self.repo.get_user(user_id)
        if not user:
            raise ValueError("User not found")
        return UserRead.model_validate(user)

    def update_profile(self, user_id: int, payload: UserUpdate) -> UserRead:
        user = self.repo.get_user(user_id)
        if not user:
            raise ValueError("User not found")

        user.name = payload.name
        self.repo.save(user)
        return UserRead.model_validate(user)
