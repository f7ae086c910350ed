"""
服务器模块 - 数据库管理与组件装配
"""

from .database import PostgreSQLManager
from .server import CVBoosterServer

__all__ = ["CVBoosterServer", "PostgreSQLManager"]
