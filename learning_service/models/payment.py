"""
支付交易模型 - 银行转账订阅交易记录
"""

from enum import Enum

from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey, DECIMAL, Index, text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from learning_service.database import Base


class PaymentStatus(str, Enum):
    """交易状态: pending -> confirmed / pending -> expired"""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    EXPIRED = "expired"


class PaymentTransaction(Base):
    """订阅支付交易模型"""
    __tablename__ = "payment_transactions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    package_id = Column(Integer, ForeignKey("packages.id"), nullable=False, index=True)

    amount = Column(DECIMAL(10, 2), nullable=False)  # 创建时从套餐价格复制
    status = Column(String(20), default=PaymentStatus.PENDING.value, nullable=False, index=True)
    reference_number = Column(String(255), nullable=False, unique=True, index=True)
    qr_code_data = Column(Text, nullable=True)  # 模拟银行转账二维码数据(JSON)
    expires_at = Column(DateTime, nullable=False, index=True)

    # 管理员确认信息
    confirmed_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    confirmed_at = Column(DateTime, nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # 关联关系
    user = relationship("User", foreign_keys=[user_id])
    package = relationship("Package", lazy="selectin")
    confirmed_by = relationship("User", foreign_keys=[confirmed_by_id])

    __table_args__ = (
        # 同一用户同一套餐最多一笔待支付交易
        Index(
            "uq_payment_pending_user_package",
            "user_id",
            "package_id",
            unique=True,
            sqlite_where=text("status = 'pending'"),
            postgresql_where=text("status = 'pending'"),
        ),
    )

    @property
    def is_pending(self) -> bool:
        return self.status == PaymentStatus.PENDING.value

    def __repr__(self):
        return f"<PaymentTransaction id={self.id} ref={self.reference_number} status={self.status}>"
