"""
配置读取模块
config.yaml 存放业务配置，providers.ini 存放数据库等敏感信息
"""

import yaml
import configparser
from pathlib import Path
from typing import Dict, Optional, List, Any, Union
from pydantic import BaseModel, Field, field_validator, model_validator
from .logger import get_logger

logger = get_logger(__name__)

# 项目根目录
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

# 规则来源名称
SOURCE_DATABASE = "database"
SOURCE_STATIC = "static"
KNOWN_SOURCES = (SOURCE_DATABASE, SOURCE_STATIC)


class ProjectConfig(BaseModel):
    """项目基础配置"""
    name: str = Field("NavKeeper", description="项目名称")
    debug: bool = Field(False, description="调试模式")
    log_level: Optional[str] = Field(None, description="日志级别，未设置时由 debug 决定；环境变量 NAVKEEPER_LOG_LEVEL 优先")


class DatabaseConfig(BaseModel):
    """数据库配置"""
    url: Optional[str] = Field(None, description="完整的 SQLAlchemy 连接 URL，优先于 host 等字段")
    host: Optional[str] = Field(None, description="数据库主机")
    port: Optional[str] = Field(None, description="数据库端口")
    username: Optional[str] = Field(None, description="数据库用户名")
    password: Optional[str] = Field(None, description="数据库密码")
    project_name: Optional[str] = Field(None, description="数据库名，默认与项目名称一致")

    @field_validator("port", mode="before")
    @classmethod
    def coerce_port(cls, value: Optional[Union[int, str]]) -> Optional[str]:
        """YAML 中的 port: 5432 会被解析为整数"""
        if value is None:
            return None
        return str(value)


class NavigationConfig(BaseModel):
    """导航规则解析配置"""
    rules_file: str = Field("navigation_rules.yaml", description="静态规则 YAML 文件，相对项目根目录")
    source_priority: List[str] = Field(
        default_factory=lambda: [SOURCE_DATABASE, SOURCE_STATIC],
        description="规则来源的查询顺序，靠前的优先"
    )
    query_timeout: float = Field(2.0, gt=0, description="数据库规则查询超时（秒）")
    skip_unavailable_sources: bool = Field(False, description="来源不可用时是否跳过而不是报错")

    @field_validator("source_priority")
    @classmethod
    def check_source_priority(cls, value: List[str]) -> List[str]:
        if not value:
            raise ValueError("source_priority 不能为空")
        names = [v.strip().lower() for v in value]
        unknown = [n for n in names if n not in KNOWN_SOURCES]
        if unknown:
            raise ValueError(f"未知的规则来源: {unknown}，可选: {list(KNOWN_SOURCES)}")
        if len(set(names)) != len(names):
            raise ValueError(f"source_priority 存在重复项: {value}")
        return names


# ============================================
# 主配置类
# ============================================

class Settings(BaseModel):
    """
    应用总配置
    """

    project: ProjectConfig = Field(default_factory=ProjectConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    navigation: NavigationConfig = Field(default_factory=NavigationConfig)

    @model_validator(mode='after')
    def sync_database_project_name(self):
        """数据库名、用户名缺省时与项目名称保持一致"""
        if self.database.project_name is None:
            self.database.project_name = self.project.name

        if self.database.username is None:
            self.database.username = self.project.name

        return self

    @property
    def PROJECT_NAME(self) -> str:
        return self.project.name

    @property
    def DEBUG(self) -> bool:
        return self.project.debug

    @property
    def DATABASE_URL(self) -> str:
        """
        数据库 URL
        1. database.url 显式配置时直接使用
        2. 配置了 host 时拼接 PostgreSQL (asyncpg) URL
        3. 否则使用本地 SQLite 文件
        """
        db = self.database
        if db.url:
            return db.url
        if db.host:
            password = db.password or ""
            port = db.port or "5432"
            return f"postgresql+asyncpg://{db.username}:{password}@{db.host}:{port}/{db.project_name}"
        return f"sqlite+aiosqlite:///{PROJECT_ROOT / 'data' / 'navkeeper.db'}"

    @property
    def RULES_FILE(self) -> Path:
        """静态规则文件的绝对路径"""
        path = Path(self.navigation.rules_file)
        return path if path.is_absolute() else PROJECT_ROOT / path

    @classmethod
    def load_config(cls) -> "Settings":
        """
        1. 读取 providers.ini (数据库连接等敏感信息)
        2. 读取 config.yaml (项目与导航配置)
        3. 合并并实例化 Settings 对象
        """
        ini_config = cls._load_providers_ini()

        yaml_path = PROJECT_ROOT / "config.yaml"
        yaml_config = {}

        if yaml_path.exists():
            try:
                with open(yaml_path, "r", encoding="utf-8") as f:
                    yaml_config = yaml.safe_load(f) or {}
            except Exception as e:
                logger.warning(f"无法读取 config.yaml: {e}，将使用默认配置")
        else:
            logger.warning(f"未找到 {yaml_path}，将使用默认配置")

        # providers.ini 中的数据库配置覆盖 config.yaml
        if ini_config.get("database") is not None:
            yaml_config["database"] = ini_config["database"]

        instance = cls(**yaml_config)
        instance._ensure_directories()
        return instance

    @staticmethod
    def _load_providers_ini() -> Dict[str, Any]:
        """
        从 providers.ini 加载 [DATABASE] 节
        """
        ini_path = PROJECT_ROOT / "providers.ini"
        result: Dict[str, Any] = {'database': None}

        if not ini_path.exists():
            logger.debug(f"未找到 {ini_path}，数据库使用 config.yaml 或默认配置")
            return result

        try:
            config = configparser.ConfigParser()
            config.read(ini_path, encoding='utf-8')

            for section in config.sections():
                if section.lower() != 'database':
                    logger.warning(f"忽略未知配置节 [{section}]")
                    continue

                result['database'] = DatabaseConfig(
                    url=config.get(section, 'url', fallback=None),
                    host=config.get(section, 'host', fallback=None),
                    port=config.get(section, 'port', fallback=None),
                    username=config.get(section, 'username', fallback=None),
                    password=config.get(section, 'password', fallback=None),
                    project_name=config.get(section, 'dbname', fallback=None),
                )
                logger.info("成功加载数据库配置")

        except Exception as e:
            logger.warning(f"无法读取 providers.ini: {e}")

        return result

    def _ensure_directories(self):
        """确保必要的目录存在"""
        for name in ("logs", "data"):
            (PROJECT_ROOT / name).mkdir(parents=True, exist_ok=True)

    def get_database_config(self) -> DatabaseConfig:
        return self.database

    def get_navigation_config(self) -> NavigationConfig:
        return self.navigation

    def get_absolute_path(self, relative_path: str) -> Path:
        """
        将相对路径转换为绝对路径
        """
        return PROJECT_ROOT / relative_path

# 实例化配置 (应用启动时自动加载)
settings = Settings.load_config()


# ============================================
# 便捷函数
# ============================================

def get_settings() -> Settings:
    """
    获取全局配置实例
    """
    return settings


def reload_config() -> Settings:
    """
    重新加载配置
    """
    global settings
    settings = Settings.load_config()
    return settings
