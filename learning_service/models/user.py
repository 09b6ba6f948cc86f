"""
用户模型 - 账户信息、角色权限与会员状态
"""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, JSON
from sqlalchemy.sql import func
from learning_service.database import Base


class User(Base):
    """用户模型"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    full_name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    phone = Column(String(255), nullable=True)
    address = Column(Text, nullable=True)
    age = Column(Integer, nullable=True)
    role = Column(String(20), default="user", nullable=False)  # user, admin

    # 会员状态 (仅普通用户)
    is_premium = Column(Boolean, default=False, nullable=False)
    premium_expiry_date = Column(DateTime, nullable=True)  # NULL + is_premium 表示终身会员
    current_package = Column(String(50), nullable=True)    # 最近激活的套餐类型

    permissions = Column(JSON, nullable=True)  # 管理员权限列表
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<User id={self.id} email={self.email} role={self.role} premium={self.is_premium}>"
