"""
订阅套餐服务
负责套餐查询和默认套餐初始化
"""

from decimal import Decimal
from typing import List, Optional
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from learning_service.models.package import Package


# 默认套餐 (仅在套餐表为空时写入)
DEFAULT_PACKAGES = [
    {
        "name": "Monthly Premium",
        "type": "monthly",
        "description": "Access to all premium courses and features for 1 month. "
                       "Perfect for trying out premium content.",
        "price": Decimal("9.99"),
        "duration_days": 30,
    },
    {
        "name": "6-Month Premium",
        "type": "semi_annual",
        "description": "Access to all premium courses and features for 6 months. "
                       "Great value with 20% savings compared to monthly.",
        "price": Decimal("47.99"),
        "duration_days": 180,
    },
    {
        "name": "Annual Premium",
        "type": "annual",
        "description": "Access to all premium courses and features for 1 year. "
                       "Best value with 40% savings and priority support.",
        "price": Decimal("71.99"),
        "duration_days": 365,
    },
    {
        "name": "Lifetime Premium",
        "type": "lifetime",
        "description": "Lifetime access to all premium courses and features. "
                       "One-time payment for unlimited learning.",
        "price": Decimal("199.99"),
        "duration_days": None,  # 终身
    },
]


class PackageService:
    """订阅套餐服务"""

    async def list_active_packages(self, db: AsyncSession) -> List[Package]:
        """获取所有可购买套餐 (按时长升序，终身排最后)"""
        result = await db.execute(
            select(Package)
            .where(Package.is_active.is_(True))
            .order_by(Package.duration_days.is_(None), Package.duration_days.asc(), Package.id.asc())
        )
        return list(result.scalars().all())

    async def get_package(self, db: AsyncSession, package_id: int) -> Optional[Package]:
        """按ID获取可购买套餐"""
        result = await db.execute(
            select(Package).where(Package.id == package_id, Package.is_active.is_(True))
        )
        return result.scalar_one_or_none()

    async def get_package_by_type(self, db: AsyncSession, package_type: str) -> Optional[Package]:
        """按类型标识获取可购买套餐"""
        result = await db.execute(
            select(Package).where(Package.type == package_type, Package.is_active.is_(True))
        )
        return result.scalar_one_or_none()

    async def seed_default_packages(self, db: AsyncSession) -> int:
        """
        初始化默认套餐

        幂等: 套餐表非空时不做任何修改

        Returns:
            新写入的套餐数量
        """
        existing = await db.execute(select(func.count(Package.id)))
        if (existing.scalar() or 0) > 0:
            logger.info("订阅套餐已存在，跳过初始化")
            return 0

        db.add_all([Package(is_active=True, **data) for data in DEFAULT_PACKAGES])
        await db.commit()

        logger.info(f"默认订阅套餐初始化成功: {len(DEFAULT_PACKAGES)} 个")
        return len(DEFAULT_PACKAGES)


# 全局实例
package_service = PackageService()
