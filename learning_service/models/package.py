"""
订阅套餐模型 - 月度/半年/年度/终身
"""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, DECIMAL
from sqlalchemy.sql import func
from learning_service.database import Base


class Package(Base):
    """订阅套餐模型"""
    __tablename__ = "packages"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    type = Column(String(50), nullable=False, unique=True, index=True)  # monthly, semi_annual, annual, lifetime
    description = Column(Text, nullable=True)
    price = Column(DECIMAL(10, 2), nullable=False)
    duration_days = Column(Integer, nullable=True)  # NULL 表示终身
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    @property
    def is_lifetime(self) -> bool:
        return self.duration_days is None

    def __repr__(self):
        return f"<Package id={self.id} type={self.type} price={self.price}>"
