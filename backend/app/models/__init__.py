"""数据模型"""

from app.models.app_metadata import AppMetadata
from app.models.base import Base

__all__ = [
    "AppMetadata",
    "Base",
]
