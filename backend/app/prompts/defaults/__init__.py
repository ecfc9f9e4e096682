"""默认提示词定义

所有默认提示词集中定义在此模块。
"""

from app.prompts.defaults.advisor import (
    ADVISOR_PROMPTS,
    DEFAULT_LENGTH,
    DEFAULT_TONE,
    LENGTH_INSTRUCTIONS,
    TONE_PHRASES,
)

DEFAULT_PROMPTS: dict[str, dict] = {
    **ADVISOR_PROMPTS,
}

__all__ = [
    "DEFAULT_PROMPTS",
    "TONE_PHRASES",
    "DEFAULT_TONE",
    "LENGTH_INSTRUCTIONS",
    "DEFAULT_LENGTH",
]
