"""
日志配置模块
控制台输出 + 按大小轮转的主日志和错误日志
"""

import sys
from loguru import logger

from learning_service.config import settings


def setup_logger(log_file: str = None, level: str = None):
    """配置日志系统"""
    log_file = log_file or settings.log_file
    level = (level or settings.log_level).upper()

    # 移除默认配置
    logger.remove()

    # 控制台输出（开发环境）
    if settings.environment == "development":
        logger.add(
            sys.stdout,
            level=level,
            format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | {message}",
        )

    # 主日志文件
    logger.add(
        log_file,
        level=level,
        rotation="50 MB",
        retention="7 days",
        compression="gz",
        enqueue=True,          # 异步写入，防止阻塞
        backtrace=False,
        diagnose=False,
    )

    # 错误日志文件
    error_log_file = log_file.replace('.log', '.error.log')
    logger.add(
        error_log_file,
        level="ERROR",
        rotation="10 MB",
        retention="30 days",
        compression="gz",
        enqueue=True,
        filter=lambda record: record["level"].name in ["ERROR", "CRITICAL"]
    )

    return logger
