"""项目路径工具"""

from functools import lru_cache
from pathlib import Path


@lru_cache
def get_project_root() -> Path:
    """获取 backend 目录（app 包的上一级）"""
    return Path(__file__).resolve().parents[2]
