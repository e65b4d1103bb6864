"""
FastAPI 接口服务
提供导航解析与数据库规则管理的 HTTP 接口
"""
from typing import List, Optional
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Query, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from .. import __version__
from ..core import get_logger, get_settings
from ..core.config import SOURCE_DATABASE, SOURCE_STATIC
from ..core.errors import InvalidRequest, InvalidRule, SourceUnavailable
from ..memory.database import db_manager, get_db, init_db
from ..memory.models import NavigationRuleRecord
from ..memory.repositories import NavigationRuleRepository
from ..navigation import NavigationResolver, StaticRuleSource, build_resolver

logger = get_logger(__name__)


# ============================================
# Pydantic 模型
# ============================================

class ResolveRequest(BaseModel):
    """导航解析请求"""
    from_view_id: str = Field(..., description="当前视图", min_length=1)
    action: Optional[str] = Field(default=None, description="触发导航的动作标识")
    outcome: str = Field(..., description="业务结果标记", min_length=1)


class ResolveResponse(BaseModel):
    """导航解析响应，resolved=False 时调用方自行处理"""
    resolved: bool
    to_view_id: Optional[str] = None
    source: Optional[str] = None


class RuleCreateRequest(BaseModel):
    """创建数据库规则"""
    from_view_id: str = Field(..., description="出发视图")
    to_view_id: str = Field(..., description="目标视图")
    condition: str = Field(..., description="匹配的 outcome")
    from_action: Optional[str] = Field(default=None, description="限定的动作标识")


class RuleResponse(BaseModel):
    """数据库规则"""
    id: int
    from_view_id: str
    to_view_id: str
    condition: str
    from_action: Optional[str] = None

    @classmethod
    def from_record(cls, record: NavigationRuleRecord) -> "RuleResponse":
        return cls(
            id=record.id,
            from_view_id=record.from_view_id,
            to_view_id=record.to_view_id,
            condition=record.condition,
            from_action=record.from_action,
        )


class ReloadResponse(BaseModel):
    """静态规则重新加载结果"""
    rule_count: int


class HealthResponse(BaseModel):
    """健康检查响应"""
    status: str
    sources: List[str]
    version: str = __version__


# ============================================
# FastAPI 应用
# ============================================

def get_resolver(request: Request) -> NavigationResolver:
    resolver = getattr(request.app.state, "resolver", None)
    if resolver is None:
        raise HTTPException(status_code=503, detail="导航解析器未初始化")
    return resolver


async def ensure_tables() -> bool:
    """启动时建表；数据库不可用时只记录警告，解析请求届时返回 503"""
    try:
        await init_db()
    except (SQLAlchemyError, OSError) as e:
        logger.warning(f"数据库建表失败，数据库规则来源暂不可用: {e}")
        return False
    return True


def create_app(resolver: Optional[NavigationResolver] = None) -> FastAPI:
    """
    创建 API 应用
    resolver: 预先构建的解析器；为空时在启动阶段按配置构建
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """应用生命周期管理"""
        logger.info("API 服务启动中...")
        if getattr(app.state, "resolver", None) is None:
            settings = get_settings()
            if SOURCE_DATABASE in settings.navigation.source_priority:
                await ensure_tables()
            app.state.resolver = build_resolver(settings)

        yield

        logger.info("API 服务关闭中...")
        await db_manager.dispose()

    app = FastAPI(
        title="NavKeeper API",
        description="页面导航规则解析服务",
        version=__version__,
        lifespan=lifespan
    )
    app.state.resolver = resolver

    # CORS 中间件
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # 生产环境应限制来源
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ============================================
    # API 端点
    # ============================================

    @app.get("/health", response_model=HealthResponse, tags=["系统"])
    async def health_check(request: Request):
        """健康检查"""
        resolver = getattr(request.app.state, "resolver", None)
        return HealthResponse(
            status="healthy" if resolver is not None else "degraded",
            sources=resolver.sources if resolver is not None else [],
        )

    @app.post("/navigation/resolve", response_model=ResolveResponse, tags=["导航"])
    async def resolve_navigation(body: ResolveRequest, resolver: NavigationResolver = Depends(get_resolver)):
        """
        解析下一个视图

        - **from_view_id**: 当前视图
        - **action**: 可选，动作标识
        - **outcome**: 结果标记，区分大小写
        """
        try:
            result = await resolver.resolve(body.from_view_id, body.action, body.outcome)
        except InvalidRequest as e:
            raise HTTPException(status_code=422, detail=str(e))
        except SourceUnavailable as e:
            logger.error(f"导航解析失败: {e}")
            raise HTTPException(status_code=503, detail=str(e))

        return ResolveResponse(resolved=result.resolved, to_view_id=result.to_location, source=result.source)

    @app.get("/rules", response_model=List[RuleResponse], tags=["规则"])
    async def list_rules(
        from_view_id: Optional[str] = Query(default=None, description="只列出该出发视图的规则"),
        session: AsyncSession = Depends(get_db),
    ):
        """列出数据库中的规则"""
        repo = NavigationRuleRepository(session)
        if from_view_id:
            records = await repo.find_rules_by_from_location(from_view_id)
        else:
            records = await repo.list_all()
        return [RuleResponse.from_record(r) for r in records]

    @app.post("/rules", response_model=RuleResponse, status_code=201, tags=["规则"])
    async def create_rule(body: RuleCreateRequest, session: AsyncSession = Depends(get_db)):
        """新增数据库规则，字段为空时返回 400"""
        repo = NavigationRuleRepository(session)
        try:
            record = await repo.create(body.from_view_id, body.to_view_id, body.condition, body.from_action)
        except InvalidRule as e:
            raise HTTPException(status_code=400, detail=str(e))
        logger.info(f"新增导航规则: {record!r}")
        return RuleResponse.from_record(record)

    @app.delete("/rules/{rule_id}", status_code=204, tags=["规则"])
    async def delete_rule(rule_id: int, session: AsyncSession = Depends(get_db)):
        """删除数据库规则"""
        repo = NavigationRuleRepository(session)
        if not await repo.delete(rule_id):
            raise HTTPException(status_code=404, detail=f"规则 {rule_id} 不存在")
        logger.info(f"删除导航规则 id={rule_id}")
        return Response(status_code=204)

    @app.post("/rules/static/reload", response_model=ReloadResponse, tags=["规则"])
    async def reload_static_rules(resolver: NavigationResolver = Depends(get_resolver)):
        """重新读取静态规则文件"""
        source = resolver.get_source(SOURCE_STATIC)
        if not isinstance(source, StaticRuleSource) or source.path is None:
            raise HTTPException(status_code=404, detail="未配置基于文件的静态规则来源")
        try:
            count = source.reload()
        except InvalidRule as e:
            raise HTTPException(status_code=400, detail=str(e))
        return ReloadResponse(rule_count=count)

    return app


app = create_app()


# ============================================
# 启动函数
# ============================================

def run_server(host: str = "0.0.0.0", port: int = 8000, reload: bool = False):
    """
    启动 API 服务器

    Args:
        host: 监听地址
        port: 监听端口
        reload: 是否启用热重载
    """
    import uvicorn

    logger.info(f"启动 API 服务器: http://{host}:{port}")

    uvicorn.run(
        "navkeeper.interfaces.api_server:app",
        host=host,
        port=port,
        reload=reload
    )


if __name__ == "__main__":
    run_server()
