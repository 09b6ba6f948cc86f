"""
Learning Service - 启动入口

bootstrap: 建表 + 初始化默认套餐 (幂等)
run_worker: 启动定时清理任务并常驻运行

用法:
    python -m learning_service.main
"""

import asyncio
from loguru import logger

from learning_service.config import settings, validate_settings
from learning_service.core.logging_config import setup_logger
from learning_service.database import init_db, close_db, DatabaseTransaction
from learning_service.services.package_service import package_service
from learning_service.services.payment_scheduler import payment_scheduler


async def bootstrap() -> int:
    """初始化数据库和默认套餐，返回新写入的套餐数量"""
    await init_db()
    async with DatabaseTransaction() as session:
        seeded = await package_service.seed_default_packages(session)
    return seeded


async def run_worker():
    """启动后台定时任务进程"""
    setup_logger()
    validate_settings()

    logger.info(f"{settings.app_name} 启动中 (环境: {settings.environment})")
    await bootstrap()

    if not settings.scheduler_enabled:
        logger.warning("定时任务已禁用 (SCHEDULER_ENABLED=false)，退出")
        await close_db()
        return

    await payment_scheduler.start()
    try:
        await asyncio.Event().wait()
    except asyncio.CancelledError:
        logger.info("收到退出信号")
    finally:
        await payment_scheduler.stop()
        await close_db()


def main():
    try:
        asyncio.run(run_worker())
    except KeyboardInterrupt:
        logger.info(f"{settings.app_name} 已停止")


if __name__ == "__main__":
    main()
