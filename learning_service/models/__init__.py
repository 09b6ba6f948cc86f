"""
Learning Service - 数据模型

SQLAlchemy ORM模型定义
"""

from .user import User
from .package import Package
from .payment import PaymentTransaction, PaymentStatus
from .content import Category, Course, Lesson

__all__ = [
    "User",
    "Package",
    "PaymentTransaction",
    "PaymentStatus",
    "Category",
    "Course",
    "Lesson",
]
