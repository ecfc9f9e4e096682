"""前台公开 API 与顾问管理 API 测试"""

from unittest.mock import AsyncMock

from app.core.errors import BackingStoreUnavailableError


class TestHealth:
    """测试健康检查"""

    def test_health_ok(self, client):
        body = client.get("/health").json()
        assert body["status"] == "ok"
        assert body["kv"] == "memory"
        assert body["llm"] == "configured"

    def test_health_degraded(self, client, kv):
        """测试 KV 不可用时返回 degraded"""
        kv.get = AsyncMock(side_effect=BackingStoreUnavailableError("down"))
        body = client.get("/health").json()
        assert body["status"] == "degraded"
        assert body["kv"] == "unavailable"

    def test_store_failure_is_503(self, client, kv):
        """测试目录读取失败返回 503 错误结构"""
        kv.get = AsyncMock(side_effect=BackingStoreUnavailableError("Backing store could not be reached"))
        resp = client.get("/admin/api/catalog")
        assert resp.status_code == 503
        assert resp.json()["error"]["code"] == "backing_store_unavailable"


class TestPublicCatalog:
    """测试前台商品列表"""

    def test_lists_products(self, client):
        client.post("/admin/api/catalog", json={"name": "Hay", "imageUrl": "https://cdn.test/h.jpg"})
        products = client.get("/api/public/catalog").json()
        assert products[0]["imageSrc"] == "https://cdn.test/h.jpg"


class TestRecommendations:
    """测试推荐接口"""

    def test_finder_payload(self, client):
        """测试前台选择器的载荷"""
        resp = client.post(
            "/api/recommendations",
            json={"horseType": "Senior Horse (15+ years)", "activity": "Light (1-3 days/week)", "health": []},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert [r["product"] for r in body["recommendations"]] == [
            "SafeChoice Senior",
            "EQ8 Senior",
            "Senior",
        ]
        assert body["matchedRules"] == ["Senior"]
        assert body["fallback"] is False

    def test_junk_body_falls_back(self, client):
        """测试无法识别的请求体返回通用推荐"""
        body = client.post("/api/recommendations", json=["not", "a", "profile"]).json()
        assert body["fallback"] is True
        assert len(body["recommendations"]) == 3


class TestChat:
    """测试聊天接口"""

    def test_chat_reply(self, client, chat_model):
        resp = client.post("/api/chat", json={"messages": [{"role": "user", "content": "Senior feed?"}]})
        assert resp.status_code == 200
        assert resp.json() == {"reply": "Try SafeChoice Senior.", "degraded": False}
        chat_model.ainvoke.assert_awaited_once()

    def test_chat_requires_messages(self, client):
        resp = client.post("/api/chat", json={"messages": []})
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "invalid_input"

    def test_chat_model_failure(self, client, chat_model):
        """测试模型失败时返回兜底回复而不是 5xx"""
        chat_model.ainvoke.side_effect = RuntimeError("upstream down")
        body = client.post("/api/chat", json={"messages": [{"role": "user", "content": "Hi"}]}).json()
        assert body["degraded"] is True
        assert "(561) 633-6003" in body["reply"]


class TestContact:
    """测试联系表单"""

    def test_submit_and_list(self, client):
        resp = client.post("/api/contact", json={"name": "Ann", "phone": "555-0100", "topic": "Delivery"})
        assert resp.json() == {"ok": True, "message": "Thank you! We will contact you shortly."}

        inquiries = client.get("/admin/api/advisor/inquiries").json()
        assert inquiries[0]["name"] == "Ann"
        assert inquiries[0]["date"]


class TestAdvisorAdmin:
    """测试顾问管理接口"""

    def test_persona_and_prompt_preview(self, client):
        """测试保存人设与知识库后预览提示词"""
        persona = client.put(
            "/admin/api/advisor/persona",
            json={"name": "Maggie", "tone": "casual", "responseLength": "short"},
        ).json()
        assert persona["responseLength"] == "short"

        client.post("/admin/api/advisor/knowledge", json={"question": "Hours?", "answer": "8-6"})
        preview = client.get("/admin/api/advisor/prompt").json()

        assert preview["knowledgeCount"] == 1
        assert preview["prompt"].startswith("You are Maggie,")
        assert "Q: Hours?\nA: 8-6" in preview["prompt"]

    def test_knowledge_index_not_found(self, client):
        resp = client.delete("/admin/api/advisor/knowledge/3")
        assert resp.status_code == 404

    def test_test_chat_with_draft(self, client, chat_model):
        resp = client.post(
            "/admin/api/advisor/test-chat",
            json={"message": "Hi", "botRules": {"name": "Draft"}, "kbEntries": []},
        )
        assert resp.status_code == 200
        system = chat_model.ainvoke.await_args.args[0][0]
        assert system.content.startswith("You are Draft,")


class TestSiteAdminAndPublicData:
    """测试站点内容管理与前台白名单读取"""

    def test_reviews_crud_and_public_read(self, client):
        client.post("/admin/api/site/reviews", json={"name": "Ann", "text": "Great hay", "rating": 5})
        resp = client.put("/admin/api/site/reviews/0", json={"name": "Ann", "text": "Great hay!", "featured": True})
        assert resp.json()[0]["featured"] is True

        public = client.get("/api/public/reviews").json()
        assert public["data"][0]["text"] == "Great hay!"

        assert client.delete("/admin/api/site/reviews/4").status_code == 404

    def test_review_requires_text(self, client):
        resp = client.post("/admin/api/site/reviews", json={"name": "Ann"})
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "invalid_input"

    def test_site_content_round_trip(self, client):
        saved = client.put("/admin/api/site/content", json={"hero-headline": "Feed done right", "x": 1}).json()
        assert saved == {"hero-headline": "Feed done right"}
        assert client.get("/api/public/site_content").json() == {"data": saved}

    def test_welcome_message_is_public(self, client):
        client.put("/admin/api/advisor/persona", json={"name": "Maggie", "welcomeMessage": "Howdy!"})
        body = client.get("/api/public/chatbot_rules").json()
        assert body["data"]["welcomeMessage"] == "Howdy!"

    def test_products_key_and_catalog_route(self, client):
        client.post("/admin/api/catalog", json={"name": "Hay"})
        assert client.get("/api/public/products").json()["data"][0]["name"] == "Hay"
        assert client.get("/api/public/catalog").json()[0]["name"] == "Hay"

    def test_unlisted_key_not_found(self, client):
        resp = client.get("/api/public/contacts")
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "not_found"
