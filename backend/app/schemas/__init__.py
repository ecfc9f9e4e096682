"""Pydantic 模型"""

from app.schemas.advisor import (
    ChatReply,
    ChatRequest,
    ChatTurn,
    ContactInquiry,
    KnowledgeEntry,
    PersonaConfig,
)
from app.schemas.product import (
    ImageBlob,
    ImageUrl,
    Product,
    ProductDraft,
    ProductFields,
)
from app.schemas.recommendation import (
    AnimalProfile,
    Recommendation,
    RecommendationResult,
)
from app.schemas.site import PublicData, Review, ReviewSource

__all__ = [
    "ChatRequest",
    "ChatReply",
    "ChatTurn",
    "ContactInquiry",
    "KnowledgeEntry",
    "PersonaConfig",
    "ImageUrl",
    "ImageBlob",
    "Product",
    "ProductDraft",
    "ProductFields",
    "AnimalProfile",
    "Recommendation",
    "RecommendationResult",
    "Review",
    "ReviewSource",
    "PublicData",
]
