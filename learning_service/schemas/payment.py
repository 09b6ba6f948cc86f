"""
订阅支付相关的Pydantic模型
"""

from pydantic import BaseModel, Field
from typing import Optional
from decimal import Decimal
from datetime import datetime


class PackageResponse(BaseModel):
    """订阅套餐响应模型"""
    id: int = Field(..., description="套餐ID")
    name: str = Field(..., description="套餐名称")
    type: str = Field(..., description="套餐类型标识")
    description: Optional[str] = Field(None, description="套餐描述")
    price: Decimal = Field(..., description="价格")
    duration_days: Optional[int] = Field(None, description="有效天数 (终身为空)")
    is_active: bool = Field(default=True, description="是否可购买")

    class Config:
        from_attributes = True


class PaymentTransactionResponse(BaseModel):
    """支付交易响应模型"""
    id: int
    user_id: int
    package_id: int
    amount: Decimal
    status: str
    reference_number: str
    qr_code_data: Optional[str] = None
    expires_at: datetime
    confirmed_by_id: Optional[int] = None
    confirmed_at: Optional[datetime] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    package: Optional[PackageResponse] = None

    class Config:
        from_attributes = True


class QRCodePayload(BaseModel):
    """银行转账二维码数据 (模拟)"""
    type: str = "bank_transfer"
    bank: str
    account: str
    amount: float
    reference: str
    message: str
