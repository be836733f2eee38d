#!/usr/bin/env python3
"""
持仓决策工具 API 服务启动脚本

监听地址可通过环境变量 APP_HOST / APP_PORT 覆盖（支持 .env）。
"""
import os

import uvicorn
from dotenv import load_dotenv

from app.app import VERSION

load_dotenv(os.path.join(os.path.dirname(os.path.abspath(__file__)), '.env'))

if __name__ == "__main__":
    host = os.getenv("APP_HOST", "0.0.0.0")
    port = int(os.getenv("APP_PORT", "8000"))
    print(f"🚀 持仓决策工具 API v{VERSION} 启动于 http://{host}:{port}")
    uvicorn.run(
        "app.app:app",
        host=host,
        port=port,
        workers=1,
        log_level="info",
        access_log=True
    )
