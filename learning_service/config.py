"""
Learning Service - 配置管理

统一管理应用配置，支持环境变量和默认值
"""

from pydantic_settings import BaseSettings
from pydantic import Field
import os


class Settings(BaseSettings):
    """应用配置"""

    # 应用基础配置
    app_name: str = Field(default="Learning Service", alias="APP_NAME")
    environment: str = Field(default="development", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")

    # 数据库配置
    database_url: str = Field(
        default="sqlite+aiosqlite:///./data/learning_service.db",
        alias="DATABASE_URL"
    )

    # 日志配置
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_file: str = Field(default="logs/learning-service.log", alias="LOG_FILE")

    # 数据目录配置
    data_dir: str = Field(default="./data", alias="DATA_DIR")
    logs_dir: str = Field(default="./logs", alias="LOGS_DIR")

    # 支付配置
    payment_expiry_hours: int = Field(default=24, alias="PAYMENT_EXPIRY_HOURS")  # 待支付交易有效期
    reference_prefix: str = Field(default="PAY", alias="REFERENCE_PREFIX")
    reference_max_attempts: int = Field(default=5, alias="REFERENCE_MAX_ATTEMPTS")  # 参考号冲突重试次数

    # 银行转账收款信息 (二维码数据)
    bank_name: str = Field(default="Your Bank Name", alias="BANK_NAME")
    bank_account: str = Field(default="1234567890", alias="BANK_ACCOUNT")
    payment_message_template: str = Field(
        default="Payment for premium subscription - {reference}",
        alias="PAYMENT_MESSAGE_TEMPLATE"
    )

    # 会员配置
    premium_expiring_soon_days: int = Field(default=7, alias="PREMIUM_EXPIRING_SOON_DAYS")

    # 定时任务配置 (crontab格式)
    scheduler_enabled: bool = Field(default=True, alias="SCHEDULER_ENABLED")
    scheduler_timezone: str = Field(default="UTC", alias="SCHEDULER_TIMEZONE")
    premium_expiry_cron: str = Field(default="0 * * * *", alias="PREMIUM_EXPIRY_CRON")  # 每小时
    payment_cleanup_cron: str = Field(default="0 */6 * * *", alias="PAYMENT_CLEANUP_CRON")  # 每6小时
    daily_cleanup_cron: str = Field(default="0 2 * * *", alias="DAILY_CLEANUP_CRON")  # 每天凌晨2点

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        # 确保目录存在
        os.makedirs(self.data_dir, exist_ok=True)
        os.makedirs(self.logs_dir, exist_ok=True)
        log_dir = os.path.dirname(self.log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)


# 创建全局配置实例
settings = Settings()

# 配置验证
def validate_settings(config: Settings = None):
    """验证关键配置"""
    config = config or settings
    errors = []

    if config.payment_expiry_hours <= 0:
        errors.append("PAYMENT_EXPIRY_HOURS 必须大于0")

    if config.reference_max_attempts < 1:
        errors.append("REFERENCE_MAX_ATTEMPTS 至少为1")

    if config.environment == "production":
        if config.debug:
            errors.append("生产环境不应启用DEBUG模式")
        if config.bank_account == "1234567890" or config.bank_name == "Your Bank Name":
            errors.append("生产环境必须设置真实的BANK_NAME和BANK_ACCOUNT")

    if errors:
        raise ValueError(f"配置验证失败: {'; '.join(errors)}")

    return True

# 在导入时验证配置
if settings.environment == "production":
    validate_settings()
