"""
工具模块 - 通用工具函数

提供配置读取和日志初始化
"""

from .config_utils import mk_logs_path, read_config, read_pg_config, setup_logging

__all__ = ["mk_logs_path", "read_config", "read_pg_config", "setup_logging"]
