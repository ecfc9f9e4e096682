"""站点内容 Schema

- Review: 客户评价，前台作为口碑展示
- 站点文案: 固定字段表上的扁平字典（首屏、关于、服务、团队、联系方式、SEO）
"""

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ReviewSource(StrEnum):
    """评价来源"""

    GOOGLE = "google"
    FACEBOOK = "facebook"
    DIRECT = "direct"


class Review(BaseModel):
    """客户评价"""

    model_config = ConfigDict(extra="ignore")

    name: str = Field(..., min_length=1)
    text: str = Field(..., min_length=1)
    rating: int = Field(5, ge=1, le=5)
    date: str = ""
    source: ReviewSource = ReviewSource.GOOGLE
    featured: bool = False

    @field_validator("name", "text", mode="after")
    @classmethod
    def _strip(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("rating", mode="before")
    @classmethod
    def _default_rating(cls, value: Any) -> Any:
        if value is None or value == "":
            return 5
        return value

    @field_validator("date", mode="before")
    @classmethod
    def _coerce_date(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value).strip()

    @field_validator("source", mode="before")
    @classmethod
    def _unknown_source(cls, value: Any) -> Any:
        if isinstance(value, str) and value.strip().lower() in ReviewSource._value2member_map_:
            return value.strip().lower()
        return ReviewSource.GOOGLE


SITE_CONTENT_FIELDS: tuple[str, ...] = (
    # 首屏
    "hero-headline", "hero-subheadline", "hero-desc", "cta1", "cta2", "hero-bg",
    # 关于
    "about-heading", "about-para1", "about-para2", "about-image",
    "stat1-num", "stat1-label", "stat2-num", "stat2-label", "stat3-num", "stat3-label",
    # 服务
    "svc1-title", "svc1-icon", "svc1-desc", "svc1-detail", "svc1-image",
    "svc2-title", "svc2-icon", "svc2-desc", "svc2-detail", "svc2-image",
    "svc3-title", "svc3-icon", "svc3-desc", "svc3-detail", "svc3-image",
    # 团队
    "team1-name", "team1-role", "team1-bio", "team1-photo", "team1-cred",
    "team2-name", "team2-role", "team2-bio", "team2-photo", "team2-cred",
    # 联系方式与配送
    "phone", "email", "address", "hours-wk", "hours-wknd",
    "instagram", "facebook", "maps-url", "delivery-min", "delivery-areas",
    # SEO
    "seo-title", "seo-desc", "seo-keywords",
)


class PublicData(BaseModel):
    """前台可读数据"""

    data: Any = None
