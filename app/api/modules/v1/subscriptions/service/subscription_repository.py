import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.api.core.exceptions import PersistenceError
from app.api.modules.v1.subscriptions.models.subscription_model import Subscription

logger = logging.getLogger("app")


class SubscriptionCRUD:
    """CRUD operations for Subscription model."""

    @staticmethod
    async def insert(db: AsyncSession, name: str, email: str) -> Subscription:
        """
        Insert a new subscription with a fresh id and the current UTC time.

        The row is flushed but not committed; the caller owns the transaction.

        Args:
            db: Async database session
            name: Subscriber's name, stored verbatim
            email: Subscriber's email address, stored verbatim

        Returns:
            Subscription: The flushed row

        Raises:
            PersistenceError: If the database rejects the insert or cannot be reached
        """
        subscription = Subscription(
            id=uuid.uuid4(),
            name=name,
            email=email,
            subscribed_at=datetime.now(timezone.utc),
        )

        try:
            db.add(subscription)
            await db.flush()
        except (SQLAlchemyError, OSError) as e:
            logger.error(
                "Failed to insert subscription for email=%s: %s",
                email,
                str(e),
                exc_info=True,
            )
            raise PersistenceError("Failed to save subscription") from e

        logger.info(
            "Inserted subscription: id=%s, email=%s",
            subscription.id,
            subscription.email,
        )
        return subscription

    @staticmethod
    async def get_by_email(db: AsyncSession, email: str) -> list[Subscription]:
        """
        Get subscriptions for an email address, oldest first.

        Args:
            db: Database session
            email: Exact email address

        Returns:
            List of Subscription objects
        """
        result = await db.execute(
            select(Subscription)
            .where(Subscription.email == email)
            .order_by(Subscription.subscribed_at)
        )
        return list(result.scalars().all())

    @staticmethod
    async def count(db: AsyncSession) -> int:
        result = await db.execute(select(func.count()).select_from(Subscription))
        return result.scalar_one()
