"""
日志模块
所有日志挂在 "navkeeper" 根记录器下，handler 只在根上安装一次：
- 控制台输出
- logs/navkeeper-YYYY-MM-DD.log，按大小滚动

日志级别依次取自：环境变量 NAVKEEPER_LOG_LEVEL、config.yaml 的 project.log_level、
project.debug（为真时 DEBUG），默认 INFO
"""

import os
import sys
import logging
import yaml
from logging.handlers import RotatingFileHandler
from pathlib import Path
from datetime import date
from typing import Optional

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
LOG_DIR = PROJECT_ROOT / "logs"
ROOT_LOGGER_NAME = "navkeeper"
LEVEL_ENV_VAR = "NAVKEEPER_LOG_LEVEL"


class ConditionalFormatter(logging.Formatter):
    """WARNING 及以上的记录附带 模块:行号"""

    SHORT_FMT = "[%(asctime)s] [%(levelname)s] [%(name)s] - %(message)s"
    LONG_FMT = "[%(asctime)s] [%(levelname)s] [%(name)s] [%(module)s:%(lineno)d] - %(message)s"

    def __init__(self, datefmt: str = "%Y-%m-%d %H:%M:%S"):
        super().__init__(self.SHORT_FMT, datefmt=datefmt)
        self._long = logging.Formatter(self.LONG_FMT, datefmt=datefmt)

    def format(self, record):
        if record.levelno >= logging.WARNING:
            return self._long.format(record)
        return super().format(record)


def parse_level(value) -> Optional[int]:
    """'debug' / 'WARNING' / 10 -> 日志级别，无法识别时返回 None"""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        level = logging.getLevelName(value.strip().upper())
        if isinstance(level, int):
            return level
    return None


def _read_project_section() -> dict:
    config_path = PROJECT_ROOT / "config.yaml"
    if not config_path.exists():
        return {}
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        # 此时日志系统还没建好，只能写标准错误
        sys.stderr.write(f"Warning: Failed to read logging config: {e}\n")
        return {}
    project = config.get("project") if isinstance(config, dict) else None
    return project if isinstance(project, dict) else {}


def resolve_level(env: Optional[dict] = None, project: Optional[dict] = None) -> int:
    env = os.environ if env is None else env
    project = _read_project_section() if project is None else project

    for candidate in (env.get(LEVEL_ENV_VAR), project.get("log_level")):
        level = parse_level(candidate)
        if level is not None:
            return level
    return logging.DEBUG if project.get("debug") else logging.INFO


def configure_logging(level: Optional[int] = None) -> logging.Logger:
    """安装根记录器的 handler，重复调用只调整级别"""
    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(level if level is not None else resolve_level())

    if root.handlers:
        return root

    formatter = ConditionalFormatter()
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)

    LOG_DIR.mkdir(exist_ok=True)
    file_handler = RotatingFileHandler(
        LOG_DIR / f"navkeeper-{date.today().isoformat()}.log",
        maxBytes=5*1024*1024,
        backupCount=5,
        encoding="utf-8"
    )
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)

    # 不再交给 Python 根记录器，避免被 uvicorn 等重复输出
    root.propagate = False
    return root


def configure_logging_once():
    if not logging.getLogger(ROOT_LOGGER_NAME).handlers:
        configure_logging()


def get_logger(name: str) -> logging.Logger:
    """
    获取 navkeeper 下的子记录器
    包外的名称（脚本里的 __main__ 等）会挂到 navkeeper.<name> 下
    """
    configure_logging_once()
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)
