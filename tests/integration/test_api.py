"""
Integration tests for API endpoints (api/main.py)
"""
import httpx
import pytest

from ai_providers import AIProviderError, AIProviderType
from api.source_routes import get_url_fetcher
from api.writing_routes import get_writing_service
from core.streaming import Frame, FrameKind, parse_event_stream
from core.url_fetcher import UrlFetcher
from core.writing_service import WritingService


def generate_payload(**overrides):
    payload = {
        "sourceContent": "笔记：远程办公让沟通成本变高。",
        "config": {
            "articleType": "blog",
            "audience": "tech",
            "style": "professional",
            "wordCount": "1000-1500",
            "extraInstructions": "",
        },
        "provider": "openai",
        "modelId": "gpt-4o",
        "apiKey": "sk-test",
    }
    payload.update(overrides)
    return payload


def review_payload(**overrides):
    payload = {
        "article": "# 标题\n\n正文。",
        "reviewStep": "content",
        "provider": "deepseek",
        "modelId": "deepseek-chat",
        "apiKey": "sk-test",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def use_dispatcher(api_client):
    """Route writing endpoints through the given fake dispatcher."""
    from api.main import app

    def _use(dispatcher):
        app.dependency_overrides[get_writing_service] = lambda: WritingService(dispatcher)
        return dispatcher

    return _use


class TestAPIBasics:
    """Test basic API functionality."""

    def test_health_check(self, api_client):
        response = api_client.get("/api/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_list_providers(self, api_client):
        response = api_client.get("/api/providers")

        assert response.status_code == 200
        providers = {p["id"]: p for p in response.json()}
        assert set(providers) == {t.value for t in AIProviderType}
        assert providers["openai"]["defaultModel"] == "gpt-4o"

    def test_get_provider(self, api_client):
        response = api_client.get("/api/providers/deepseek")

        assert response.status_code == 200
        assert response.json()["defaultModel"] == "deepseek-chat"

    def test_unknown_provider_404(self, api_client):
        response = api_client.get("/api/providers/gemini")

        assert response.status_code == 404
        assert response.json() == {"error": "Unknown provider: gemini"}

    def test_error_schema_documented(self, api_client):
        schema = api_client.get("/openapi.json").json()

        responses = schema["paths"]["/api/generate"]["post"]["responses"]
        for status in ("400", "502"):
            ref = responses[status]["content"]["application/json"]["schema"]["$ref"]
            assert ref.endswith("/ErrorResponse")
        assert set(schema["components"]["schemas"]["ErrorResponse"]["properties"]) == {"error", "provider"}


class TestStageEndpoints:
    """Test /api/generate, /api/review and /api/revise."""

    def test_generate_streams_frames(self, api_client, use_dispatcher, make_dispatcher):
        dispatcher = use_dispatcher(make_dispatcher(["# 标题\n\n", "正文。"]))

        response = api_client.post("/api/generate", json=generate_payload())

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        assert response.headers["cache-control"] == "no-cache"
        assert response.headers["x-accel-buffering"] == "no"
        assert parse_event_stream(response.text) == [
            Frame.data("# 标题\n\n"),
            Frame.data("正文。"),
            Frame.done(),
        ]
        request = dispatcher.requests[0]
        assert request.provider is AIProviderType.OPENAI
        assert "1000-1500" in request.messages[-1].content

    def test_review_streams_frames(self, api_client, use_dispatcher, make_dispatcher):
        dispatcher = use_dispatcher(make_dispatcher(["审校后的文章。"]))

        response = api_client.post("/api/review", json=review_payload(reviewStep="detail"))

        assert response.status_code == 200
        assert parse_event_stream(response.text)[0] == Frame.data("审校后的文章。")
        assert dispatcher.requests[0].provider is AIProviderType.DEEPSEEK

    def test_revise_streams_frames(self, api_client, use_dispatcher, make_dispatcher):
        dispatcher = use_dispatcher(make_dispatcher(["修改后。"]))

        response = api_client.post("/api/revise", json={
            "article": "原文。",
            "instruction": "更口语化",
            "provider": "qwen",
            "modelId": "qwen-plus",
            "apiKey": "sk-test",
        })

        assert response.status_code == 200
        assert "更口语化" in dispatcher.requests[0].messages[-1].content

    @pytest.mark.parametrize("path,payload,message", [
        ("/api/generate", generate_payload(sourceContent=""), "Source content is required"),
        ("/api/generate", generate_payload(apiKey=""), "API key is required"),
        ("/api/generate", generate_payload(provider="gemini"), "Unsupported provider: gemini"),
        ("/api/review", review_payload(reviewStep=None), "Review step is required"),
        ("/api/review", review_payload(article="  "), "Article to review is required"),
        ("/api/revise", {"article": "原文。", "apiKey": "sk", "provider": "openai"}, "Revision instruction is required"),
    ])
    def test_validation_errors(self, api_client, use_dispatcher, make_dispatcher, path, payload, message):
        dispatcher = use_dispatcher(make_dispatcher())

        response = api_client.post(path, json=payload)

        assert response.status_code == 400
        assert response.json() == {"error": message}
        assert dispatcher.requests == []

    def test_unknown_review_step(self, api_client, use_dispatcher, make_dispatcher):
        use_dispatcher(make_dispatcher())

        response = api_client.post("/api/review", json=review_payload(reviewStep="tone"))

        assert response.status_code == 400
        assert response.json()["error"].startswith("reviewStep")

    def test_malformed_body(self, api_client, use_dispatcher, make_dispatcher):
        use_dispatcher(make_dispatcher())

        response = api_client.post(
            "/api/generate", content=b"{not json", headers={"content-type": "application/json"}
        )

        assert response.status_code == 400
        assert "error" in response.json()

    def test_provider_refusal_before_stream(self, api_client, use_dispatcher, make_dispatcher):
        refusal = AIProviderError(AIProviderType.OPENAI, "Failed to create stream: 401", code="stream_open_failed")
        use_dispatcher(make_dispatcher(refuse_with=refusal))

        response = api_client.post("/api/generate", json=generate_payload())

        assert response.status_code == 502
        assert response.json() == {"error": "Failed to create stream: 401", "provider": "openai"}

    def test_provider_request_error_is_400(self, api_client, use_dispatcher, make_dispatcher):
        refusal = AIProviderError(AIProviderType.OPENAI, "Model ID is required", code="missing_model")
        use_dispatcher(make_dispatcher(refuse_with=refusal))

        response = api_client.post("/api/generate", json=generate_payload(modelId=""))

        assert response.status_code == 400
        assert response.json()["provider"] == "openai"

    def test_mid_stream_failure_is_error_frame(self, api_client, use_dispatcher, make_dispatcher):
        use_dispatcher(make_dispatcher(["Hello"], fail_with=RuntimeError("rate limited")))

        response = api_client.post("/api/generate", json=generate_payload())

        assert response.status_code == 200
        frames = parse_event_stream(response.text)
        assert frames == [Frame.data("Hello"), Frame.error("rate limited")]
        assert not any(f.kind is FrameKind.DONE for f in frames)


class TestSourceEndpoints:
    """Test /api/fetch-url and /api/upload-source."""

    @pytest.fixture
    def use_page(self, api_client):
        from api.main import app

        def _use(status_code, html=""):
            transport = httpx.MockTransport(lambda request: httpx.Response(status_code, html=html))
            app.dependency_overrides[get_url_fetcher] = lambda: UrlFetcher(transport=transport)

        return _use

    def test_fetch_url(self, api_client, use_page):
        use_page(200, "<html><head><title>标题</title></head><body><p>足够长的正文内容在这里。</p></body></html>")

        response = api_client.post("/api/fetch-url", json={"url": "https://example.com/a"})

        assert response.status_code == 200
        assert response.json() == {
            "content": "# 标题\n\n足够长的正文内容在这里。",
            "source": "https://example.com/a",
        }

    def test_fetch_url_nothing_extracted(self, api_client, use_page):
        use_page(200, "<html><body><nav>menu</nav></body></html>")

        response = api_client.post("/api/fetch-url", json={"url": "https://example.com/a"})

        assert response.status_code == 422

    def test_fetch_url_upstream_error(self, api_client, use_page):
        use_page(404)

        response = api_client.post("/api/fetch-url", json={"url": "https://example.com/a"})

        assert response.status_code == 502
        assert "404" in response.json()["error"]

    def test_fetch_url_malformed(self, api_client, use_page):
        use_page(200)

        response = api_client.post("/api/fetch-url", json={"url": "not-a-url"})

        assert response.status_code == 400

    def test_upload_source(self, api_client):
        response = api_client.post(
            "/api/upload-source",
            files={"file": ("notes.md", "# 笔记\n\n要点一".encode("utf-8"), "text/markdown")},
        )

        assert response.status_code == 200
        assert response.json() == {"content": "# 笔记\n\n要点一", "source": "notes.md"}

    def test_upload_rejects_binary_types(self, api_client):
        response = api_client.post(
            "/api/upload-source",
            files={"file": ("scan.pdf", b"%PDF-1.4", "application/pdf")},
        )

        assert response.status_code == 400
