"""ORM 基类"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """所有数据表的声明式基类"""
