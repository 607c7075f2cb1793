"""
Tests for the transport client: auth, rate limiting and error mapping.
"""

from __future__ import annotations

import httpx
import pytest
from conftest import BASE_URL, TEST_TOKEN, MockApi

from scix_client.infrastructure.http.client import ApiRequest, SciXBase, parse_retry_after
from scix_client.shared.config import ClientConfig
from scix_client.shared.exceptions import (
    APIError,
    AuthRequiredError,
    NetworkError,
    NotFoundError,
    ParseError,
    RateLimitError,
)


@pytest.fixture
async def base(api: MockApi, config, limiter):
    http = httpx.AsyncClient(transport=httpx.MockTransport(api.handler))
    client = SciXBase(config, limiter, http_client=http)
    yield client
    await client.close()


# =============================================================================
# ApiRequest
# =============================================================================


class TestApiRequest:
    def test_get_drops_none_params_and_keeps_order(self):
        req = ApiRequest.get("/search/query", [("q", "a"), ("fl", None), ("rows", 10)])
        assert req.method == "GET"
        assert req.params == (("q", "a"), ("rows", "10"))

    def test_post_text_sets_content_type(self):
        req = ApiRequest.post_text("/reference/text", "line1\nline2")
        assert req.content == "line1\nline2"
        assert req.content_type == "text/plain"
        assert req.json is None

    def test_requests_are_hashable(self):
        assert hash(ApiRequest.get("/a", {"x": 1})) == hash(ApiRequest.get("/a", {"x": 1}))


# =============================================================================
# Success path
# =============================================================================


class TestExecute:
    async def test_sends_auth_and_user_agent(self, base, api):
        api.add("GET", "/search/query", {"ok": True})

        result = await base._get_json("/search/query", {"q": "black holes"})

        assert result == {"ok": True}
        sent = api.last
        assert sent.headers["Authorization"] == f"Bearer {TEST_TOKEN}"
        assert sent.headers["User-Agent"].startswith("scix-client/")
        assert sent.url.path == "/v1/search/query"
        assert sent.url.params["q"] == "black holes"

    async def test_each_request_consumes_a_token(self, base, api, limiter):
        api.add("GET", "/x", {})
        await base._get_json("/x")
        await base._get_json("/x")
        assert limiter.tokens == pytest.approx(3.0)

    async def test_empty_body_is_empty_object(self, base, api):
        api.add("POST", "/biblib/documents/abc")
        assert await base._post_json("/biblib/documents/abc", {"action": "add"}) == {}

    async def test_rate_limit_headers_update_limiter(self, base, api, limiter, clock):
        api.add(
            "GET",
            "/x",
            {},
            headers={"X-RateLimit-Remaining": "0", "X-RateLimit-Reset": str(int(clock.wall() + 20))},
        )
        await base._get_json("/x")
        assert limiter.server_state.remaining == 0
        assert limiter.snapshot().server_reset_in == pytest.approx(20.0)


# =============================================================================
# Error mapping
# =============================================================================


class TestErrorMapping:
    async def test_no_token_makes_no_transport_call(self, api, limiter):
        http = httpx.AsyncClient(transport=httpx.MockTransport(api.handler))
        client = SciXBase(ClientConfig(token=None, base_url=BASE_URL), limiter, http_client=http)

        with pytest.raises(AuthRequiredError):
            await client._get_json("/search/query", {"q": "x"})

        assert api.requests == []
        assert limiter.tokens == pytest.approx(5.0)
        await client.close()

    async def test_429_with_retry_after(self, base, api, limiter):
        api.add("GET", "/search/query", {"error": "Too many requests"}, status=429, headers={"Retry-After": "30"})

        with pytest.raises(RateLimitError) as exc_info:
            await base._get_json("/search/query")

        assert exc_info.value.retry_after == 30.0
        assert exc_info.value.status == 429
        assert limiter.server_state.remaining == 0
        assert limiter.snapshot().server_reset_in == pytest.approx(30.0)

    async def test_429_without_retry_after(self, base, api):
        api.add("GET", "/x", status=429)
        with pytest.raises(RateLimitError) as exc_info:
            await base._get_json("/x")
        assert exc_info.value.retry_after is None

    async def test_404(self, base, api):
        api.add("GET", "/resolver/nope", {"error": "not found"}, status=404)
        with pytest.raises(NotFoundError) as exc_info:
            await base._get_json("/resolver/nope")
        assert exc_info.value.status == 404
        assert exc_info.value.identifier == "/resolver/nope"

    async def test_401_is_auth_error(self, base, api):
        api.add("GET", "/x", {"error": "Unauthorized"}, status=401)
        with pytest.raises(AuthRequiredError, match="Unauthorized"):
            await base._get_json("/x")

    @pytest.mark.parametrize(
        ("body", "expected"),
        [
            ({"error": "Solr is down"}, "Solr is down"),
            ({"message": "bad gateway"}, "bad gateway"),
            ({"error": {"msg": "nested message"}}, "nested message"),
        ],
    )
    async def test_5xx_extracts_message(self, base, api, body, expected):
        api.add("GET", "/x", body, status=502)
        with pytest.raises(APIError) as exc_info:
            await base._get_json("/x")
        assert exc_info.value.status == 502
        assert exc_info.value.api_message == expected
        assert exc_info.value.retryable is True

    async def test_non_json_error_body(self, base, api):
        api.add("GET", "/x", status=500, text="Internal Server Error")
        with pytest.raises(APIError) as exc_info:
            await base._get_json("/x")
        assert exc_info.value.api_message == "Internal Server Error"

    async def test_network_failure(self, base, api):
        api.fail("GET", "/x", httpx.ConnectError("connection refused"))
        with pytest.raises(NetworkError, match="connection refused"):
            await base._get_json("/x")

    async def test_timeout(self, base, api):
        api.fail("GET", "/x", httpx.ReadTimeout("slow"))
        with pytest.raises(NetworkError, match="timed out"):
            await base._get_json("/x")

    async def test_malformed_body_is_parse_error(self, base, api):
        api.add("GET", "/x", status=200, text="<html>not json</html>")
        with pytest.raises(ParseError) as exc_info:
            await base._get_json("/x")
        assert "/x" in str(exc_info.value)

    async def test_parser_errors_become_parse_error(self, base, api):
        api.add("GET", "/x", ["a", "list"])
        with pytest.raises(ParseError):
            await base.execute(ApiRequest.get("/x"), lambda r: r.json()["response"])


class TestParseRetryAfter:
    def test_seconds(self):
        assert parse_retry_after("30") == 30.0
        assert parse_retry_after(" 1.5 ") == 1.5

    def test_negative_clamped(self):
        assert parse_retry_after("-4") == 0.0

    def test_http_date_in_past(self):
        assert parse_retry_after("Wed, 21 Oct 2015 07:28:00 GMT") == 0.0

    def test_missing_or_garbage(self):
        assert parse_retry_after(None) is None
        assert parse_retry_after("") is None
        assert parse_retry_after("soon") is None
