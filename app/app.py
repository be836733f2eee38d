"""
加密货币持仓决策工具 API 服务
主应用入口
"""
import logging
from datetime import datetime, timezone
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.models.schemas import HealthResponse
from app.routers import market, risk, portfolio, sell_check
from app.services.market_service import get_market_service

# 配置日志 - 只输出到控制台
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler()
    ]
)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"

# 创建FastAPI应用
app = FastAPI(
    title="加密货币持仓决策工具API",
    description="卖出问卷、风险雷达、持仓集中度检查",
    version=VERSION,
    docs_url="/docs",
    redoc_url="/redoc"
)

# 添加CORS中间件
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 注册路由
app.include_router(market.router)
app.include_router(risk.router)
app.include_router(portfolio.router)
app.include_router(sell_check.router)


# 生命周期事件
@app.on_event("startup")
async def startup_event():
    """启动时输出上游配置"""
    service = await get_market_service()
    logger.info(f"🚀 服务 v{VERSION} 启动，行情上游: {service.base_url}")


@app.on_event("shutdown")
async def shutdown_event():
    """关闭时释放行情服务资源"""
    service = await get_market_service()
    await service.close()

# 基础路由：根路径与 /health 共用同一个健康检查
@app.get("/", response_model=HealthResponse)
@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """健康检查端点"""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc).isoformat(),
        version=VERSION
    )
