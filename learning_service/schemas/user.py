"""
用户会员信息模型
"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class PremiumInfo(BaseModel):
    """会员状态信息"""
    is_premium: bool = Field(..., description="是否拥有会员权益")
    premium_expiry_date: Optional[datetime] = Field(None, description="会员到期时间 (终身为空)")
    current_package: Optional[str] = Field(None, description="当前套餐类型")
    days_remaining: Optional[int] = Field(None, description="剩余天数 (终身或非会员为空)")
    is_expiring_soon: bool = Field(default=False, description="是否即将到期")
