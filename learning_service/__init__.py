"""
Learning Service - 学习平台订阅与会员服务

订阅套餐、银行转账支付确认、会员激活与过期清理
"""

__version__ = "1.0.0"
