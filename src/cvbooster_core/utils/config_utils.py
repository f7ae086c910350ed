"""
配置管理工具函数
"""

import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv
from loguru import logger

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent.parent
DEFAULT_CONFIG_PATH = PROJECT_ROOT / "config" / "config.yaml"

# 环境变量覆盖 (env var -> config path)
ENV_OVERRIDES = {
    "CVBOOSTER_PG_HOST": ("server_components", "pg", "host"),
    "CVBOOSTER_PG_PORT": ("server_components", "pg", "port"),
    "CVBOOSTER_PG_DATABASE": ("server_components", "pg", "database"),
    "CVBOOSTER_PG_USER": ("server_components", "pg", "user"),
    "CVBOOSTER_PG_PASSWORD": ("server_components", "pg", "password"),
    "CVBOOSTER_USER_HEADER": ("auth", "user_header"),
    "CVBOOSTER_PUBLIC_URL": ("affiliate", "base_url"),
    "CVBOOSTER_PDF_FONT": ("export", "pdf", "unicode_font_path"),
}


def _apply_env_overrides(config: Dict[str, Any]) -> Dict[str, Any]:
    for env_key, path in ENV_OVERRIDES.items():
        value = os.getenv(env_key)
        if value is None:
            continue
        section = config
        for key in path[:-1]:
            section = section.setdefault(key, {})
        section[path[-1]] = int(value) if value.isdigit() else value
    return config


def read_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """读取主配置文件

    Path resolution: argument, then ``CVBOOSTER_CONFIG``, then
    ``config/config.yaml`` at the project root.
    """
    load_dotenv()
    path = Path(config_path or os.getenv("CVBOOSTER_CONFIG") or DEFAULT_CONFIG_PATH)
    with open(path, "r", encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}
    return _apply_env_overrides(config)


def read_pg_config(config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """读取PostgreSQL配置"""
    config = config if config is not None else read_config()
    return config.get("server_components", {}).get("pg", {})


def mk_logs_path(log_dir: Optional[str] = None) -> Path:
    """创建日志目录"""
    log_path = Path(log_dir) if log_dir else PROJECT_ROOT / "logs"
    log_path.mkdir(mode=0o777, parents=True, exist_ok=True)
    return log_path


def setup_logging(config: Optional[Dict[str, Any]] = None) -> None:
    """配置loguru: 控制台 + 按日期命名的文件"""
    settings = (config or {}).get("logging", {})
    level = settings.get("level", "INFO")
    log_path = mk_logs_path(settings.get("dir"))

    logger.remove()
    logger.add(sys.stderr, level=level)
    logger.add(
        log_path / f"{datetime.now().strftime('%Y-%m-%d')}.log",
        rotation=settings.get("rotation", "100 MB"),
        level=level,
        enqueue=True,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {message}",
    )
