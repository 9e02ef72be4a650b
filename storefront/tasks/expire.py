# storefront/tasks/expire.py
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from storefront.celery_worker import celery_app
from storefront.data.database import SessionLocal
from storefront.repos.cart_repo import CartRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def expire_stale_carts(db: Session, now: datetime | None = None) -> int:
    """Aktywne koszyki po expires_at przechodza w abandoned. Zwraca liczbe koszykow."""
    now = now or datetime.now(timezone.utc)
    repo = CartRepo(db)

    carts = repo.get_expired_active_carts(now)
    logger.info(f"Found {len(carts)} carts to expire")

    for cart in carts:
        cart.abandon()

    repo.commit()
    return len(carts)


@celery_app.task(name="storefront.tasks.expire.expire_carts_task")
def expire_carts_task():
    logger.info("Expire carts task started")

    db = SessionLocal()
    try:
        return expire_stale_carts(db)
    finally:
        db.close()
