from .logger import get_logger
from .config import get_settings, reload_config, Settings, PROJECT_ROOT
from .errors import NavigationError, InvalidRule, InvalidRequest, SourceUnavailable
from .events import NavigationRule, ResolutionRequest, ResolutionResult

__all__ = [
    # 日志
    'get_logger',
    # 配置
    'get_settings',
    'reload_config',
    'Settings',
    'PROJECT_ROOT',
    # 异常
    'NavigationError',
    'InvalidRule',
    'InvalidRequest',
    'SourceUnavailable',
    # 事件
    'NavigationRule',
    'ResolutionRequest',
    'ResolutionResult',
]
