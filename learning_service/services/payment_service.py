"""
订阅支付服务
负责订阅交易创建、管理员确认、会员激活以及过期清理等核心业务逻辑
"""

import json
import secrets
import string
import time
from datetime import datetime, timedelta
from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from loguru import logger

from learning_service.config import settings
from learning_service.core.exceptions import (
    NotFoundError,
    InvalidStateError,
    InternalError,
)
from learning_service.models.package import Package
from learning_service.models.payment import PaymentTransaction, PaymentStatus
from learning_service.models.user import User
from learning_service.schemas.payment import QRCodePayload
from learning_service.services.package_service import package_service
from learning_service.utils.time_utils import utcnow, to_naive_utc

BASE36_ALPHABET = string.digits + string.ascii_lowercase


class PaymentService:
    """订阅支付服务"""

    def __init__(self):
        self.expiry_hours = settings.payment_expiry_hours
        self.reference_prefix = settings.reference_prefix
        self.reference_max_attempts = settings.reference_max_attempts

    # ------------------------------------------------------------------
    # 交易创建
    # ------------------------------------------------------------------

    def _generate_reference_number(self) -> str:
        """生成参考号: 前缀 + 完整毫秒时间戳 + 6位base36随机串(大写)"""
        timestamp = int(time.time() * 1000)
        random_suffix = "".join(secrets.choice(BASE36_ALPHABET) for _ in range(6)).upper()
        return f"{self.reference_prefix}-{timestamp}-{random_suffix}"

    def _generate_qr_code_data(self, amount, reference: str) -> str:
        """生成模拟银行转账二维码数据"""
        payload = QRCodePayload(
            bank=settings.bank_name,
            account=settings.bank_account,
            amount=float(amount),
            reference=reference,
            message=settings.payment_message_template.format(reference=reference),
        )
        return json.dumps(payload.model_dump())

    async def _allocate_reference_number(self, db: AsyncSession) -> str:
        """生成数据库中尚未使用的参考号"""
        for _ in range(self.reference_max_attempts):
            reference = self._generate_reference_number()
            result = await db.execute(
                select(PaymentTransaction.id).where(PaymentTransaction.reference_number == reference)
            )
            if result.scalar_one_or_none() is None:
                return reference
            logger.warning(f"参考号冲突，重新生成: {reference}")

        raise InternalError(
            "无法生成唯一的支付参考号",
            details={"attempts": self.reference_max_attempts}
        )

    async def _find_pending_transaction(
        self,
        db: AsyncSession,
        user_id: int,
        package_id: int
    ) -> Optional[PaymentTransaction]:
        result = await db.execute(
            select(PaymentTransaction).where(
                PaymentTransaction.user_id == user_id,
                PaymentTransaction.package_id == package_id,
                PaymentTransaction.status == PaymentStatus.PENDING.value,
            )
        )
        return result.scalars().first()

    async def create_subscription(
        self,
        db: AsyncSession,
        user_id: int,
        package_id: int
    ) -> PaymentTransaction:
        """
        创建订阅支付交易

        Args:
            db: 数据库会话
            user_id: 用户ID (来自认证身份)
            package_id: 套餐ID

        Returns:
            待支付交易

        Raises:
            NotFoundError: 用户或套餐不存在
            InvalidStateError: 该套餐已有待支付交易
            InternalError: 持久化失败
        """
        user = await db.get(User, user_id)
        if not user:
            raise NotFoundError("用户不存在", details={"user_id": user_id})

        package = await package_service.get_package(db, package_id)
        if not package:
            raise NotFoundError("套餐不存在", details={"package_id": package_id})

        if await self._find_pending_transaction(db, user_id, package_id):
            raise InvalidStateError(
                "您已有该套餐的待支付交易",
                details={"user_id": user_id, "package_id": package_id}
            )

        try:
            reference_number = await self._allocate_reference_number(db)

            payment = PaymentTransaction(
                user_id=user_id,
                package_id=package_id,
                amount=package.price,
                status=PaymentStatus.PENDING.value,
                reference_number=reference_number,
                qr_code_data=self._generate_qr_code_data(package.price, reference_number),
                expires_at=utcnow() + timedelta(hours=self.expiry_hours),
            )

            db.add(payment)
            await db.commit()
            await db.refresh(payment)

        except IntegrityError as e:
            await db.rollback()
            # 并发请求可能同时通过了上面的检查，由部分唯一索引兜底
            if await self._find_pending_transaction(db, user_id, package_id):
                raise InvalidStateError(
                    "您已有该套餐的待支付交易",
                    details={"user_id": user_id, "package_id": package_id}
                ) from e
            logger.error(f"创建订阅交易失败: 用户 {user_id}, 套餐 {package_id}, 错误: {e}")
            raise InternalError("创建订阅交易失败") from e
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"创建订阅交易失败: 用户 {user_id}, 套餐 {package_id}, 错误: {e}")
            raise InternalError("创建订阅交易失败") from e

        logger.info(
            f"创建订阅交易成功: {payment.reference_number}, 用户: {user_id}, "
            f"套餐: {package.type}, 金额: {payment.amount}"
        )
        return payment

    # ------------------------------------------------------------------
    # 管理员确认与会员激活
    # ------------------------------------------------------------------

    async def confirm_payment(
        self,
        db: AsyncSession,
        transaction_id: int,
        admin_id: int,
        notes: Optional[str] = None
    ) -> PaymentTransaction:
        """
        管理员确认银行转账到账

        交易状态更新和会员激活在同一个会话中提交

        Raises:
            NotFoundError: 交易不存在
            InvalidStateError: 交易不是待确认状态或已过期
            InternalError: 持久化失败
        """
        result = await db.execute(
            select(PaymentTransaction).where(PaymentTransaction.id == transaction_id)
        )
        transaction = result.scalar_one_or_none()

        if not transaction:
            raise NotFoundError("交易不存在", details={"transaction_id": transaction_id})

        if not transaction.is_pending:
            raise InvalidStateError(
                "交易不是待确认状态",
                details={"transaction_id": transaction_id, "status": transaction.status}
            )

        now = utcnow()
        if now > transaction.expires_at:
            raise InvalidStateError(
                "交易已过期",
                details={"transaction_id": transaction_id, "expires_at": transaction.expires_at.isoformat()}
            )

        try:
            transaction.status = PaymentStatus.CONFIRMED.value
            transaction.confirmed_by_id = admin_id
            transaction.confirmed_at = now
            transaction.notes = notes or None

            if transaction.package is not None:
                await self._apply_premium(db, transaction.user_id, transaction.package, now)
            else:
                logger.warning(f"交易 {transaction.reference_number} 关联套餐不存在，跳过会员激活")

            await db.commit()
            await db.refresh(transaction)

        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"确认支付交易失败: {transaction_id}, 错误: {e}")
            raise InternalError("确认支付交易失败") from e

        logger.info(
            f"支付交易确认成功: {transaction.reference_number}, "
            f"用户: {transaction.user_id}, 管理员: {admin_id}"
        )
        return transaction

    async def _apply_premium(
        self,
        db: AsyncSession,
        user_id: int,
        package: Package,
        now: datetime
    ) -> Optional[User]:
        """在当前会话中修改用户会员状态 (不提交)"""
        user = await db.get(User, user_id)
        if not user:
            # 用户不存在时不回滚交易确认
            logger.warning(f"会员激活跳过: 用户 {user_id} 不存在")
            return None

        user.is_premium = True
        user.current_package = package.type

        if package.duration_days:
            # 未过期的会员在原到期时间上顺延
            if user.premium_expiry_date and user.premium_expiry_date > now:
                base = user.premium_expiry_date
            else:
                base = now
            user.premium_expiry_date = base + timedelta(days=package.duration_days)
        else:
            # 终身套餐
            user.premium_expiry_date = None

        return user

    async def activate_user_premium(
        self,
        db: AsyncSession,
        user_id: int,
        package: Package,
        now: Optional[datetime] = None
    ) -> Optional[User]:
        """
        为用户激活会员

        - 有期限套餐: 已有未过期会员则顺延，否则从当前时间开始计算
        - 终身套餐: 到期时间置空
        - 用户不存在时不做任何操作
        """
        now = to_naive_utc(now) if now else utcnow()
        try:
            user = await self._apply_premium(db, user_id, package, now)
            if user is None:
                return None
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"会员激活失败: 用户 {user_id}, 错误: {e}")
            raise InternalError("会员激活失败") from e

        logger.info(f"会员激活成功: 用户 {user_id}, 套餐 {package.type}, 到期 {user.premium_expiry_date}")
        return user

    # ------------------------------------------------------------------
    # 查询
    # ------------------------------------------------------------------

    async def get_transaction(self, db: AsyncSession, transaction_id: int) -> PaymentTransaction:
        """获取交易详情"""
        transaction = await db.get(PaymentTransaction, transaction_id)
        if not transaction:
            raise NotFoundError("交易不存在", details={"transaction_id": transaction_id})
        return transaction

    async def get_user_payments(self, db: AsyncSession, user_id: int) -> List[PaymentTransaction]:
        """获取用户支付记录 (最新在前)"""
        result = await db.execute(
            select(PaymentTransaction)
            .where(PaymentTransaction.user_id == user_id)
            .order_by(PaymentTransaction.created_at.desc(), PaymentTransaction.id.desc())
        )
        return list(result.scalars().all())

    async def get_pending_payments(self, db: AsyncSession) -> List[PaymentTransaction]:
        """获取所有待确认交易 (管理员审核队列)"""
        result = await db.execute(
            select(PaymentTransaction)
            .options(selectinload(PaymentTransaction.user))
            .where(PaymentTransaction.status == PaymentStatus.PENDING.value)
            .order_by(PaymentTransaction.created_at.desc(), PaymentTransaction.id.desc())
        )
        return list(result.scalars().all())

    # ------------------------------------------------------------------
    # 过期清理 (定时任务)
    # ------------------------------------------------------------------

    async def expire_old_transactions(self, db: AsyncSession, now: Optional[datetime] = None) -> int:
        """
        将超时的待支付交易标记为过期

        Returns:
            本次标记为过期的交易数量
        """
        now = to_naive_utc(now) if now else utcnow()

        result = await db.execute(
            select(PaymentTransaction).where(
                PaymentTransaction.status == PaymentStatus.PENDING.value
            )
        )
        to_expire = [t for t in result.scalars().all() if now > t.expires_at]

        for transaction in to_expire:
            transaction.status = PaymentStatus.EXPIRED.value

        if to_expire:
            await db.commit()
            logger.info(f"已过期支付交易: {len(to_expire)} 个")

        return len(to_expire)

    async def expire_premium_users(self, db: AsyncSession, now: Optional[datetime] = None) -> int:
        """
        取消会员已到期用户的会员状态 (终身会员不受影响)

        Returns:
            本次取消会员的用户数量
        """
        now = to_naive_utc(now) if now else utcnow()

        result = await db.execute(select(User).where(User.is_premium.is_(True)))
        to_expire = [
            u for u in result.scalars().all()
            if u.premium_expiry_date is not None and now > u.premium_expiry_date
        ]

        for user in to_expire:
            user.is_premium = False
            user.premium_expiry_date = None
            user.current_package = None

        if to_expire:
            await db.commit()
            logger.info(f"已取消到期会员: {len(to_expire)} 个用户")

        return len(to_expire)


# 全局实例
payment_service = PaymentService()
