"""饲料推荐引擎

纯函数：马匹画像 -> 最多 3 条推荐。

规则表在模块加载时构建且不可变，按声明顺序匹配：
每条命中的规则依次贡献自己的候选，拼接后按 (brand, product) 去重保留首次出现，
再截断到前 3 条；没有任何规则命中时返回固定的 3 条通用推荐。
同一画像永远得到相同的有序结果，任何输入都不会抛异常。
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from app.core.logging import get_logger
from app.schemas.recommendation import (
    ActivityLevel,
    AnimalProfile,
    AnimalType,
    HealthConcern,
    Recommendation,
    RecommendationResult,
)

logger = get_logger("services.recommendation")

MAX_RECOMMENDATIONS = 3
FALLBACK_TAG = "General"


@dataclass(frozen=True)
class Rule:
    """一条推荐规则"""

    name: str
    matches: Callable[[AnimalProfile], bool]
    entries: tuple[tuple[str, str, str], ...]  # (brand, product, reason)

    def recommendations(self) -> list[Recommendation]:
        return [
            Recommendation(brand=brand, product=product, reason=reason, tags=(self.name,))
            for brand, product, reason in self.entries
        ]


def _has_concern(concern: HealthConcern) -> Callable[[AnimalProfile], bool]:
    return lambda profile: concern in profile.health_concerns


RULES: tuple[Rule, ...] = (
    Rule(
        name="Competition",
        matches=lambda p: p.type == AnimalType.COMPETITION or p.activity_level == ActivityLevel.HEAVY,
        entries=(
            ("Cavalor", "Performix", "High-energy formula perfect for performance & competition horses. Supports stamina and recovery."),
            ("Pro Elite", "Performance", "Advanced formula for intense training. Optimal protein and fat ratios for peak performance."),
            ("Red Mills", "Competition 14 Mix", "High protein competition feed trusted by professional riders worldwide."),
        ),
    ),
    Rule(
        name="Senior",
        matches=lambda p: p.type == AnimalType.SENIOR,
        entries=(
            ("Nutrena", "SafeChoice Senior", "Easy to chew, digestible formula with extra calories for senior horses that need weight support."),
            ("Buckeye", "EQ8 Senior", "Gut-health focused senior formula. Supports digestion and maintains body condition."),
            ("Pro Elite", "Senior", "Complete senior nutrition with joint support and easy digestibility."),
        ),
    ),
    Rule(
        name="Young",
        matches=lambda p: p.type == AnimalType.YOUNG,
        entries=(
            ("Pro Elite", "Growth", "Balanced calcium/phosphorus ratio ideal for growing horses. Supports bone development."),
            ("Buckeye", "Gro-N-Win", "Ration balancer for young horses on forage-based diets."),
        ),
    ),
    Rule(
        name="Hard Keeper",
        matches=lambda p: p.type == AnimalType.HARD_KEEPER,
        entries=(
            ("Cavalor", "Wholegain", "High-fat conditioning supplement for hard keepers. Safe weight gain without excitability."),
            ("Nutrena", "ProForce Senior", "High fat, high fiber formula for horses needing more calories."),
        ),
    ),
    Rule(
        name="Pleasure",
        matches=lambda p: p.type == AnimalType.PLEASURE and p.activity_level == ActivityLevel.LIGHT,
        entries=(
            ("Nutrena", "SafeChoice Maintenance", "Balanced nutrition for easy keepers and light work horses. Won't cause overheating."),
            ("Nutrena", "SafeChoice Original", "Versatile all-rounder for everyday pleasure horses. Safe starch levels."),
        ),
    ),
    Rule(
        name="Digestive",
        matches=_has_concern(HealthConcern.DIGESTIVE),
        entries=(
            ("Cavalor", "FiberForce Gastro", "Specifically formulated for horses prone to gastric ulcers. Low starch, high fiber."),
            ("Havens", "Gastro Plus", "Gentle on the digestive system. Supports gut flora and reduces ulcer risk."),
        ),
    ),
    Rule(
        name="Metabolic",
        matches=_has_concern(HealthConcern.METABOLIC),
        entries=(
            ("Pro Elite", "Starch Wise", "Low NSC formula for horses with EMS/IR. Maintains energy without metabolic spikes."),
            ("Crypto Aero", "Wholefood Feed", "Grain-free, low sugar/starch natural feed. Ideal for metabolic horses."),
        ),
    ),
    Rule(
        name="Hoof & Coat",
        matches=_has_concern(HealthConcern.HOOF_COAT),
        entries=(
            ("Supplement", "Horseshoer's Secret", "Pelleted hoof supplement with biotin for stronger, healthier hooves."),
            ("Supplement", "Max-E-Glo Rice Bran", "Stabilized rice bran supplement for improved coat shine and weight."),
        ),
    ),
    Rule(
        name="Muscle",
        matches=_has_concern(HealthConcern.MUSCLE),
        entries=(
            ("Cavalor", "Muscle Force", "Amino acid complex to support muscle building and recovery."),
            ("Pro Elite", "Topline Advantage", "High-quality protein for topline development and muscle definition."),
        ),
    ),
    Rule(
        name="Respiratory",
        matches=_has_concern(HealthConcern.RESPIRATORY),
        entries=(
            ("Cavalor", "Bronchix Pure", "Supports respiratory health. Contains herbs to keep airways clear and healthy."),
        ),
    ),
)

FALLBACK: tuple[Recommendation, ...] = (
    Recommendation(
        brand="Nutrena",
        product="SafeChoice Original",
        reason="Our most popular all-around feed. Balanced nutrition for most adult horses.",
        tags=(FALLBACK_TAG,),
    ),
    Recommendation(
        brand="Pro Elite",
        product="Omega Advantage",
        reason="Great for coat, immune system, and overall health. The omega-3 boost horses love.",
        tags=(FALLBACK_TAG,),
    ),
    Recommendation(
        brand="Expert Advice",
        product="Free Consultation",
        reason="Call us at (561) 633-6003 for a personalized recommendation!",
        tags=(FALLBACK_TAG,),
    ),
)


def _coerce_profile(profile: Any) -> AnimalProfile:
    try:
        return AnimalProfile.from_raw(profile)
    except ValidationError as e:
        logger.warning("画像解析失败，按空画像处理", error=str(e))
        return AnimalProfile()


def evaluate(profile: Any) -> RecommendationResult:
    """计算推荐，并返回命中的规则与是否走了兜底"""
    resolved = _coerce_profile(profile)

    matched: list[str] = []
    candidates: list[Recommendation] = []
    for rule in RULES:
        if rule.matches(resolved):
            matched.append(rule.name)
            candidates.extend(rule.recommendations())

    if not candidates:
        logger.debug("无规则命中，返回通用推荐", profile=resolved.model_dump(mode="json"))
        return RecommendationResult(recommendations=list(FALLBACK), fallback=True)

    seen: set[tuple[str, str]] = set()
    unique: list[Recommendation] = []
    for rec in candidates:
        key = (rec.brand, rec.product)
        if key in seen:
            continue
        seen.add(key)
        unique.append(rec)

    logger.debug("推荐计算完成", matched=matched, candidates=len(candidates))
    return RecommendationResult(
        recommendations=unique[:MAX_RECOMMENDATIONS],
        matched_rules=matched,
    )


def recommend(profile: Any) -> list[Recommendation]:
    """马匹画像 -> 最多 3 条推荐"""
    return evaluate(profile).recommendations
