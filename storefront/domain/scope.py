# storefront/domain/scope.py
from dataclasses import dataclass


@dataclass(frozen=True)
class CartScope:
    """
    Kto jest wlascicielem koszyka w danym requescie.
    Zalogowany user -> user_id, gosc -> session_id (cookie).
    """

    user_id: int | None = None
    session_id: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    @classmethod
    def for_user(cls, user_id: int) -> "CartScope":
        return cls(user_id=user_id)

    @classmethod
    def for_guest(cls, session_id: str) -> "CartScope":
        return cls(session_id=session_id)
