"""应用元数据模型 - KV 存储"""

from datetime import datetime

from sqlalchemy import DateTime, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base


class AppMetadata(Base):
    """应用元数据表（KV 存储）

    每个逻辑键保存一个完整的 JSON / 文本文档：
    - catalog: 商品目录文档
    - chatbot_rules: 顾问人设
    - chatbot_kb: 顾问知识库
    - contacts: 联系表单留言
    - img_*: 图片 data URL
    """

    __tablename__ = "app_metadata"

    key: Mapped[str] = mapped_column(String(200), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
