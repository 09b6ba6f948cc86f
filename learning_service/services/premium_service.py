"""
会员状态服务
查询用户会员信息并判断会员权益是否有效
"""

import math
from datetime import datetime
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession

from learning_service.config import settings
from learning_service.core.exceptions import NotFoundError
from learning_service.models.user import User
from learning_service.schemas.user import PremiumInfo
from learning_service.utils.time_utils import utcnow, to_naive_utc


SECONDS_PER_DAY = 24 * 60 * 60


class PremiumService:
    """会员状态服务"""

    @staticmethod
    def has_active_premium(user: User, now: Optional[datetime] = None) -> bool:
        """
        会员权益是否有效

        到期清理任务运行前，is_premium 可能仍为True，这里同时校验到期时间
        """
        if user is None or not user.is_premium:
            return False
        if user.premium_expiry_date is None:
            return True  # 终身会员
        now = to_naive_utc(now) if now else utcnow()
        return user.premium_expiry_date > now

    @classmethod
    def build_premium_info(cls, user: User, now: Optional[datetime] = None) -> PremiumInfo:
        """根据用户记录生成会员信息"""
        now = to_naive_utc(now) if now else utcnow()

        if not cls.has_active_premium(user, now):
            return PremiumInfo(
                is_premium=False,
                premium_expiry_date=None,
                current_package=None,
                days_remaining=None,
                is_expiring_soon=False,
            )

        days_remaining = None
        if user.premium_expiry_date is not None:
            remaining_seconds = (user.premium_expiry_date - now).total_seconds()
            days_remaining = max(0, math.ceil(remaining_seconds / SECONDS_PER_DAY))

        return PremiumInfo(
            is_premium=True,
            premium_expiry_date=user.premium_expiry_date,
            current_package=user.current_package,
            days_remaining=days_remaining,
            is_expiring_soon=(
                days_remaining is not None
                and days_remaining < settings.premium_expiring_soon_days
            ),
        )

    @classmethod
    async def get_premium_info(
        cls,
        db: AsyncSession,
        user_id: int,
        now: Optional[datetime] = None
    ) -> PremiumInfo:
        """获取用户会员信息"""
        user = await db.get(User, user_id)
        if not user:
            raise NotFoundError("用户不存在", details={"user_id": user_id})
        return cls.build_premium_info(user, now)


premium_service = PremiumService()
