"""
Notification Log Repository
Insert-only audit of delivery attempts.
"""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.db.models import NotificationLogModel, NotificationStatusEnum


class NotificationLogRepository:
    """Repository for NotificationLog"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self,
        user_id: str,
        execution_key: str,
        channel: str,
        recipient: str,
        success: bool,
        error_message: Optional[str] = None,
    ) -> int:
        model = NotificationLogModel(
            user_id=user_id,
            execution_key=execution_key,
            channel=channel,
            recipient=recipient,
            status=NotificationStatusEnum.SUCCESS if success else NotificationStatusEnum.FAIL,
            error_message=error_message,
        )
        self.session.add(model)
        try:
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        return model.id

    async def list_for_execution(self, user_id: str, execution_key: str) -> List[NotificationLogModel]:
        result = await self.session.execute(
            select(NotificationLogModel)
            .where(
                NotificationLogModel.user_id == user_id,
                NotificationLogModel.execution_key == execution_key,
            )
            .order_by(NotificationLogModel.id)
        )
        return list(result.scalars().all())
