import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.core.exceptions import PersistenceError
from app.api.modules.v1.subscriptions.models.subscription_model import Subscription
from app.api.modules.v1.subscriptions.schemas.subscription_schema import SubscribeForm
from app.api.modules.v1.subscriptions.service.subscription_repository import (
    SubscriptionCRUD,
)

logger = logging.getLogger("app")


class SubscriptionService:
    """
    Service class to handle subscription intake.

    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def subscribe(self, form: SubscribeForm) -> Subscription:
        """
        Persist a validated signup in its own transaction.

        Args:
            form: Decoded form carrying ``name`` and ``email``

        Returns:
            Subscription: The committed row

        Raises:
            PersistenceError: If the insert or the commit fails, including when the
                database cannot be reached. The session is
                rolled back before the error propagates.
        """
        logger.info("Saving new subscriber details in the database")

        try:
            subscription = await SubscriptionCRUD.insert(
                db=self.db,
                name=form.name,
                email=form.email,
            )
            await self.db.commit()
        except PersistenceError:
            await self.db.rollback()
            raise
        except (SQLAlchemyError, OSError) as e:
            await self.db.rollback()
            logger.error("Failed to commit subscription: %s", str(e), exc_info=True)
            raise PersistenceError("Failed to save subscription") from e

        logger.info("New subscriber details have been saved")
        return subscription
