#!/usr/bin/env python3
"""
订阅套餐初始化脚本
- 创建数据表
- 套餐表为空时写入默认套餐
"""

import asyncio
import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from learning_service.database import close_db
from learning_service.main import bootstrap


async def main():
    print("📦 初始化订阅套餐...")
    try:
        seeded = await bootstrap()
        if seeded:
            print(f"✅ 写入默认套餐 {seeded} 个")
        else:
            print("✅ 套餐已存在，无需初始化")
    finally:
        await close_db()


if __name__ == "__main__":
    asyncio.run(main())
