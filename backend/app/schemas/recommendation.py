"""推荐引擎的输入画像与输出结构

画像解析是宽松的：枚举值、前台选择器的展示文案和关键词都能识别，
无法识别的值一律视为"未设置"，而不是报错。
"""

import re
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field, field_validator


class AnimalType(StrEnum):
    """马匹类型"""

    COMPETITION = "competition"
    PLEASURE = "pleasure"
    SENIOR = "senior"
    YOUNG = "young"
    HARD_KEEPER = "hard_keeper"
    HEALTH_ISSUES = "health_issues"
    EASY_KEEPER = "easy_keeper"
    OTHER = "other"


class ActivityLevel(StrEnum):
    """运动强度"""

    LIGHT = "light"
    MODERATE = "moderate"
    HEAVY = "heavy"


class HealthConcern(StrEnum):
    """健康关注点"""

    DIGESTIVE = "digestive"
    METABOLIC = "metabolic"
    JOINT = "joint"
    RESPIRATORY = "respiratory"
    HOOF_COAT = "hoof_coat"
    MUSCLE = "muscle"


# 关键词按顺序匹配，先命中先得
_TYPE_KEYWORDS: tuple[tuple[str, AnimalType], ...] = (
    ("competition", AnimalType.COMPETITION),
    ("performance", AnimalType.COMPETITION),
    ("show", AnimalType.COMPETITION),
    ("pleasure", AnimalType.PLEASURE),
    ("trail", AnimalType.PLEASURE),
    ("senior", AnimalType.SENIOR),
    ("young", AnimalType.YOUNG),
    ("growing", AnimalType.YOUNG),
    ("foal", AnimalType.YOUNG),
    ("hard keeper", AnimalType.HARD_KEEPER),
    ("weight gain", AnimalType.HARD_KEEPER),
    ("health", AnimalType.HEALTH_ISSUES),
    ("easy keeper", AnimalType.EASY_KEEPER),
    ("other", AnimalType.OTHER),
)

_ACTIVITY_KEYWORDS: tuple[tuple[str, ActivityLevel], ...] = (
    ("light", ActivityLevel.LIGHT),
    ("moderate", ActivityLevel.MODERATE),
    ("heavy", ActivityLevel.HEAVY),
    ("intense", ActivityLevel.HEAVY),
)

_CONCERN_KEYWORDS: tuple[tuple[str, HealthConcern], ...] = (
    ("digestive", HealthConcern.DIGESTIVE),
    ("ulcer", HealthConcern.DIGESTIVE),
    ("metabolic", HealthConcern.METABOLIC),
    ("insulin", HealthConcern.METABOLIC),
    ("cushing", HealthConcern.METABOLIC),
    ("joint", HealthConcern.JOINT),
    ("mobility", HealthConcern.JOINT),
    ("respiratory", HealthConcern.RESPIRATORY),
    ("breathing", HealthConcern.RESPIRATORY),
    ("hoof", HealthConcern.HOOF_COAT),
    ("coat", HealthConcern.HOOF_COAT),
    ("muscle", HealthConcern.MUSCLE),
    ("topline", HealthConcern.MUSCLE),
)


def _normalize(value: str) -> str:
    return re.sub(r"[\s_\-]+", " ", value).strip().lower()


def _match(value: Any, enum_cls: type[StrEnum], keywords: tuple[tuple[str, Any], ...]) -> Any:
    if isinstance(value, enum_cls):
        return value
    if not isinstance(value, str):
        return None
    text = _normalize(value)
    if not text:
        return None
    for member in enum_cls:
        if text == _normalize(member.value):
            return member
    for keyword, member in keywords:
        if keyword in text:
            return member
    return None


def parse_animal_type(value: Any) -> AnimalType | None:
    return _match(value, AnimalType, _TYPE_KEYWORDS)


def parse_activity_level(value: Any) -> ActivityLevel | None:
    return _match(value, ActivityLevel, _ACTIVITY_KEYWORDS)


def parse_health_concern(value: Any) -> HealthConcern | None:
    return _match(value, HealthConcern, _CONCERN_KEYWORDS)


class AnimalProfile(BaseModel):
    """推荐请求画像（不持久化）"""

    type: AnimalType | None = None
    activity_level: ActivityLevel | None = Field(None, alias="activityLevel")
    health_concerns: frozenset[HealthConcern] = Field(
        default_factory=frozenset, alias="healthConcerns"
    )

    model_config = {"populate_by_name": True, "frozen": True}

    @field_validator("type", mode="before")
    @classmethod
    def _lenient_type(cls, value: Any) -> AnimalType | None:
        return parse_animal_type(value)

    @field_validator("activity_level", mode="before")
    @classmethod
    def _lenient_activity(cls, value: Any) -> ActivityLevel | None:
        return parse_activity_level(value)

    @field_validator("health_concerns", mode="before")
    @classmethod
    def _lenient_concerns(cls, value: Any) -> frozenset[HealthConcern]:
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, (list, tuple, set, frozenset)):
            return frozenset()
        parsed = (parse_health_concern(item) for item in value)
        return frozenset(c for c in parsed if c is not None)

    @classmethod
    def from_raw(cls, raw: Any) -> "AnimalProfile":
        """从任意输入构造画像，无法识别的内容一律忽略"""
        if isinstance(raw, cls):
            return raw
        if not isinstance(raw, dict):
            return cls()
        return cls.model_validate(
            {
                "type": raw.get("type", raw.get("horseType")),
                "activityLevel": raw.get("activityLevel", raw.get("activity_level", raw.get("activity"))),
                "healthConcerns": raw.get(
                    "healthConcerns", raw.get("health_concerns", raw.get("health"))
                ),
            }
        )


class Recommendation(BaseModel):
    """单条推荐"""

    brand: str
    product: str
    reason: str
    tags: tuple[str, ...] = ()

    model_config = {"frozen": True}


class RecommendationResult(BaseModel):
    """推荐结果（含可解释信息）"""

    recommendations: list[Recommendation]
    matched_rules: list[str] = Field(default_factory=list, serialization_alias="matchedRules")
    fallback: bool = False
