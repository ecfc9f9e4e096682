"""客户评价、站点文案与前台公开数据测试"""

import json

import pytest
from pydantic import ValidationError

from app.core.config import settings
from app.core.errors import NotFoundError
from app.schemas.advisor import PersonaConfig
from app.schemas.product import ProductDraft
from app.schemas.site import Review, ReviewSource
from app.services.advisor_config import AdvisorConfigService
from app.services.reviews import ReviewService
from app.services.site_content import PublicDataService, SiteContentService


@pytest.fixture
def reviews(kv):
    return ReviewService(kv)


@pytest.fixture
def content(kv):
    return SiteContentService(kv)


class TestReviewSchema:
    """测试评价模型"""

    def test_defaults_and_normalisation(self):
        review = Review.model_validate(
            {"name": " Ann ", "text": " Great hay ", "rating": None, "source": "Yelp", "date": None}
        )
        assert (review.name, review.text) == ("Ann", "Great hay")
        assert review.rating == 5
        assert review.source == ReviewSource.GOOGLE
        assert review.date == ""
        assert review.featured is False

    @pytest.mark.parametrize("payload", [{"name": "Ann", "text": "  "}, {"name": "Ann", "text": "ok", "rating": 6}])
    def test_invalid_review(self, payload):
        with pytest.raises(ValidationError):
            Review.model_validate(payload)


class TestReviewService:
    """测试评价列表"""

    @pytest.mark.anyio
    async def test_add_update_delete(self, reviews):
        await reviews.add(Review(name="Ann", text="Great hay"))
        await reviews.add(Review(name="Bob", text="Fast delivery", source="facebook", featured=True))

        updated = await reviews.update(0, Review(name="Ann", text="Great hay!", rating=4))
        assert [r.text for r in updated] == ["Great hay!", "Fast delivery"]

        removed = await reviews.delete(1)
        assert removed.source == ReviewSource.FACEBOOK
        assert [r.name for r in await reviews.list_all()] == ["Ann"]

    @pytest.mark.anyio
    async def test_index_out_of_range(self, reviews):
        with pytest.raises(NotFoundError):
            await reviews.delete(0)
        with pytest.raises(NotFoundError):
            await reviews.update(-1, Review(name="A", text="B"))

    @pytest.mark.anyio
    async def test_invalid_items_skipped(self, kv, reviews):
        """测试存储中的无效条目被跳过"""
        await kv.put(
            settings.REVIEWS_KV_KEY,
            json.dumps([{"name": "Ann", "text": "Good"}, {"name": "no text"}, "junk"]),
        )
        assert [r.name for r in await reviews.list_all()] == ["Ann"]

    @pytest.mark.anyio
    async def test_corrupt_list(self, kv, reviews):
        await kv.put(settings.REVIEWS_KV_KEY, "[not json")
        assert await reviews.list_all() == []


class TestSiteContentService:
    """测试站点文案"""

    @pytest.mark.anyio
    async def test_save_keeps_known_fields(self, content):
        saved = await content.save({"hero-headline": "Feed done right", "phone": 5616336003, "bogus": "x"})

        assert saved == {"hero-headline": "Feed done right", "phone": "5616336003"}
        assert await content.get() == saved

    @pytest.mark.anyio
    async def test_save_replaces_document(self, content):
        await content.save({"hero-headline": "Old", "email": "a@test"})
        await content.save({"hero-headline": "New"})
        assert await content.get() == {"hero-headline": "New"}

    @pytest.mark.anyio
    async def test_empty_and_corrupt(self, kv, content):
        assert await content.get() == {}
        await kv.put(settings.SITE_CONTENT_KV_KEY, "{oops")
        assert await content.get() == {}


class TestPublicData:
    """测试前台白名单读取"""

    @pytest.mark.anyio
    async def test_allowed_keys(self, kv, catalog_repo, reviews, content):
        await catalog_repo.upsert(ProductDraft(name="Hay", imageKey="img_1"))
        await reviews.add(Review(name="Ann", text="Great"))
        await content.save({"seo-title": "British Feed"})
        await AdvisorConfigService(kv).save_persona(
            PersonaConfig(name="Maggie", welcome_message="Hi! Ask me about feed.")
        )
        service = PublicDataService(kv)

        products = await service.read("products")
        assert products[0]["name"] == "Hay"
        assert products[0]["imageSrc"] == "/admin/api/catalog/image/img_1"
        assert (await service.read("reviews"))[0]["name"] == "Ann"
        assert await service.read("site_content") == {"seo-title": "British Feed"}
        assert (await service.read("chatbot_rules"))["welcomeMessage"] == "Hi! Ask me about feed."

    @pytest.mark.anyio
    @pytest.mark.parametrize("key", ["contacts", "chatbot_kb", "catalog", "img_1"])
    async def test_other_keys_not_found(self, kv, key):
        with pytest.raises(NotFoundError):
            await PublicDataService(kv).read(key)
