"""
异常定义
导航解析过程中各模块抛出的异常
"""
from typing import Optional


class NavigationError(Exception):
    """导航相关异常的基类"""


class InvalidRule(NavigationError, ValueError):
    """规则字段缺失或为空，创建/加载时即被拒绝"""


class InvalidRequest(NavigationError, ValueError):
    """解析请求的 from_location 或 outcome 为空"""


class SourceUnavailable(NavigationError):
    """
    规则来源无法应答（数据库异常、查询超时等）
    与"未匹配"是两种不同的结果，调用方需要区分处理
    """

    def __init__(self, source: str, reason: Optional[str] = None):
        self.source = source
        self.reason = reason
        message = f"规则来源 '{source}' 不可用"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
