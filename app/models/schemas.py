"""
通用请求和响应数据模型
"""
from pydantic import BaseModel


class HealthResponse(BaseModel):
    """健康检查响应模型"""
    status: str
    timestamp: str
    version: str
