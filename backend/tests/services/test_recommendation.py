"""饲料推荐引擎测试"""

import pytest
from pydantic import ValidationError

from app.schemas.recommendation import (
    ActivityLevel,
    AnimalProfile,
    AnimalType,
    HealthConcern,
    parse_activity_level,
    parse_animal_type,
    parse_health_concern,
)
from app.services import recommendation
from app.services.recommendation import FALLBACK, Rule, evaluate, recommend


def products(recs) -> list[tuple[str, str]]:
    return [(r.brand, r.product) for r in recs]


class TestProfileParsing:
    """测试画像解析"""

    @pytest.mark.parametrize(
        "label,expected",
        [
            ("Competition / Show Horse", AnimalType.COMPETITION),
            ("Pleasure / Trail Horse", AnimalType.PLEASURE),
            ("Senior Horse (15+ years)", AnimalType.SENIOR),
            ("Young / Growing Horse", AnimalType.YOUNG),
            ("Hard Keeper", AnimalType.HARD_KEEPER),
            ("Horse with Health Issues", AnimalType.HEALTH_ISSUES),
            ("hard_keeper", AnimalType.HARD_KEEPER),
            ("unicorn", None),
            (42, None),
        ],
    )
    def test_animal_type_labels(self, label, expected):
        """测试选择器文案与枚举值都能识别"""
        assert parse_animal_type(label) == expected

    @pytest.mark.parametrize(
        "label,expected",
        [
            ("Light (1-3 days/week)", ActivityLevel.LIGHT),
            ("Moderate (3-5 days/week)", ActivityLevel.MODERATE),
            ("Heavy / Intense (Daily training)", ActivityLevel.HEAVY),
            ("", None),
        ],
    )
    def test_activity_labels(self, label, expected):
        assert parse_activity_level(label) == expected

    @pytest.mark.parametrize(
        "label,expected",
        [
            ("Digestive / Ulcers", HealthConcern.DIGESTIVE),
            ("Metabolic (EMS/IR)", HealthConcern.METABOLIC),
            ("Hoof / Coat Issues", HealthConcern.HOOF_COAT),
            ("Muscle Development", HealthConcern.MUSCLE),
            ("Respiratory Issues", HealthConcern.RESPIRATORY),
            ("Joint / Mobility", HealthConcern.JOINT),
        ],
    )
    def test_concern_labels(self, label, expected):
        assert parse_health_concern(label) == expected

    def test_finder_payload_aliases(self):
        """测试兼容前台选择器的字段名"""
        profile = AnimalProfile.from_raw(
            {"horseType": "Senior Horse (15+ years)", "activity": "Light (1-3 days/week)", "health": ["Digestive / Ulcers", "???"]}
        )
        assert profile.type == AnimalType.SENIOR
        assert profile.activity_level == ActivityLevel.LIGHT
        assert profile.health_concerns == frozenset({HealthConcern.DIGESTIVE})

    @pytest.mark.parametrize("raw", [None, "senior", [1, 2], {"type": {"nested": True}, "healthConcerns": 5}])
    def test_junk_becomes_empty_profile(self, raw):
        """测试无法识别的输入视为空画像"""
        assert AnimalProfile.from_raw(raw) == AnimalProfile()


class TestEvaluate:
    """测试推荐计算"""

    def test_senior_light(self):
        """测试老年马 + 轻度运动"""
        result = evaluate({"type": "senior", "activityLevel": "light", "healthConcerns": []})

        assert products(result.recommendations) == [
            ("Nutrena", "SafeChoice Senior"),
            ("Buckeye", "EQ8 Senior"),
            ("Pro Elite", "Senior"),
        ]
        assert result.matched_rules == ["Senior"]
        assert result.fallback is False
        assert all(r.tags == ("Senior",) for r in result.recommendations)

    def test_heavy_activity_triggers_competition(self):
        """测试高强度运动命中竞赛规则且先于其它规则"""
        result = evaluate({"type": "senior", "activityLevel": "heavy"})
        assert result.matched_rules == ["Competition", "Senior"]
        assert products(result.recommendations) == [
            ("Cavalor", "Performix"),
            ("Pro Elite", "Performance"),
            ("Red Mills", "Competition 14 Mix"),
        ]

    def test_pleasure_requires_light_activity(self):
        """测试休闲马只在轻度运动时命中"""
        assert evaluate({"type": "pleasure", "activityLevel": "light"}).matched_rules == ["Pleasure"]
        assert evaluate({"type": "pleasure", "activityLevel": "moderate"}).fallback is True

    def test_concerns_follow_rule_order(self):
        """测试多条规则按声明顺序拼接后截断到 3 条"""
        result = evaluate(
            {"type": "young", "healthConcerns": ["respiratory", "digestive"]}
        )
        assert result.matched_rules == ["Young", "Digestive", "Respiratory"]
        assert products(result.recommendations) == [
            ("Pro Elite", "Growth"),
            ("Buckeye", "Gro-N-Win"),
            ("Cavalor", "FiberForce Gastro"),
        ]

    def test_single_entry_rule(self):
        result = evaluate({"healthConcerns": ["respiratory"]})
        assert products(result.recommendations) == [("Cavalor", "Bronchix Pure")]

    @pytest.mark.parametrize(
        "profile",
        [
            {},
            None,
            {"type": "easy_keeper", "activityLevel": "moderate"},
            {"healthConcerns": ["joint"]},
            {"type": "martian"},
        ],
    )
    def test_fallback(self, profile):
        """测试没有规则命中时返回通用推荐"""
        result = evaluate(profile)
        assert result.fallback is True
        assert result.matched_rules == []
        assert result.recommendations == list(FALLBACK)
        assert all(r.tags == ("General",) for r in result.recommendations)

    def test_returned_entries_cannot_alter_table(self):
        """测试调用方无法通过返回值修改通用推荐表"""
        rec = recommend({})[0]
        with pytest.raises(AttributeError):
            rec.tags.append("Mutated")
        with pytest.raises(ValidationError):
            rec.reason = "changed"
        assert FALLBACK[0].tags == ("General",)
        assert recommend({})[0].reason == FALLBACK[0].reason

    def test_never_more_than_three(self):
        profile = {
            "type": "competition",
            "activityLevel": "heavy",
            "healthConcerns": [c.value for c in HealthConcern],
        }
        assert len(recommend(profile)) == 3

    def test_deterministic(self):
        """测试同一画像多次计算结果一致"""
        profile = {"type": "hard_keeper", "healthConcerns": ["hoof_coat", "muscle"]}
        assert recommend(profile) == recommend(profile) == recommend(AnimalProfile.from_raw(profile))

    def test_duplicates_keep_first_occurrence(self, monkeypatch):
        """测试 (brand, product) 重复时保留首次出现"""
        rules = (
            Rule("One", lambda p: True, (("Nutrena", "SafeChoice Original", "first"),)),
            Rule("Two", lambda p: True, (("Nutrena", "SafeChoice Original", "second"), ("Havens", "Gastro Plus", "x"))),
        )
        monkeypatch.setattr(recommendation, "RULES", rules)

        result = evaluate({})
        assert products(result.recommendations) == [
            ("Nutrena", "SafeChoice Original"),
            ("Havens", "Gastro Plus"),
        ]
        assert result.recommendations[0].reason == "first"
