from __future__ import annotations

import logging
import re
from urllib.parse import parse_qs, urlparse

import httpx
import pytest
from fastapi.testclient import TestClient

from shopify_pixel_app.config import Settings
from shopify_pixel_app.main import create_app
from shopify_pixel_app.routers import oauth as oauth_module
from shopify_pixel_app.schemas import AccessTokenResult
from shopify_pixel_app.shopify_api import ShopifyApiError


class FakeShopifyApi:
    def __init__(self, *, result: AccessTokenResult | None = None, error: ShopifyApiError | None = None):
        self.result = result
        self.error = error
        self.calls: list[tuple[str, str]] = []

    async def exchange_code_for_access_token(self, *, shop_domain: str, code: str) -> AccessTokenResult:
        self.calls.append((shop_domain, code))
        if self.error is not None:
            raise self.error
        assert self.result is not None
        return self.result


@pytest.fixture()
def app_settings() -> Settings:
    return Settings(
        SHOPIFY_CLIENT_ID="client_123",
        SHOPIFY_CLIENT_SECRET="secret_456",
        SHOPIFY_SCOPES="write_pixels, read_customer_events",
        SHOPIFY_REDIRECT_URI="https://pixels.example.com/shopify/auth/callback",
        PUBLIC_HOSTNAME=None,
    )


@pytest.fixture()
def app(app_settings):
    return create_app(app_settings)


@pytest.fixture()
def api_client(app):
    with TestClient(app) as client:
        yield client


def _install_fake(app, fake: FakeShopifyApi) -> None:
    app.dependency_overrides[oauth_module.get_shopify_api] = lambda: fake


def test_install_redirects_to_shop_authorize_url(api_client):
    response = api_client.get(
        "/shopify/install/direct",
        params={"shop": "example.myshopify.com"},
        follow_redirects=False,
    )

    assert response.status_code == 302
    location = urlparse(response.headers["location"])
    assert location.scheme == "https"
    assert location.netloc == "example.myshopify.com"
    assert location.path == "/admin/oauth/authorize"

    query = parse_qs(location.query)
    assert query["client_id"] == ["client_123"]
    assert query["scope"] == ["write_pixels,read_customer_events"]
    assert query["redirect_uri"] == ["https://pixels.example.com/shopify/auth/callback"]
    assert re.fullmatch(r"[0-9a-f]{32}", query["state"][0])


def test_install_defaults_to_sandbox_shop(api_client, app_settings):
    response = api_client.get("/shopify/install/direct", follow_redirects=False)

    assert response.status_code == 302
    assert urlparse(response.headers["location"]).netloc == app_settings.SHOPIFY_DEFAULT_SHOP


def test_install_generates_fresh_state_per_request(api_client):
    states = set()
    for _ in range(3):
        response = api_client.get("/shopify/install/direct", follow_redirects=False)
        states.add(parse_qs(urlparse(response.headers["location"]).query)["state"][0])

    assert len(states) == 3


def test_callback_missing_code_fails_without_token_exchange(app, api_client):
    fake = FakeShopifyApi(result=AccessTokenResult(access_token="tok123", scope="write_pixels"))
    _install_fake(app, fake)

    response = api_client.get(
        "/shopify/auth/callback",
        params={"shop": "example.myshopify.com", "state": "abc"},
        follow_redirects=False,
    )

    assert response.status_code == 500
    payload = response.json()
    assert payload["error"] == "OAuth callback failed"
    assert "code" in payload["message"]
    assert payload["timestamp"]
    assert fake.calls == []


def test_callback_missing_shop_fails_without_token_exchange(app, api_client):
    fake = FakeShopifyApi(result=AccessTokenResult(access_token="tok123", scope="write_pixels"))
    _install_fake(app, fake)

    response = api_client.get("/shopify/auth/callback", params={"code": "abc"}, follow_redirects=False)

    assert response.status_code == 500
    assert "shop" in response.json()["message"]
    assert fake.calls == []


def test_callback_surfaces_upstream_status(app, api_client):
    fake = FakeShopifyApi(
        error=ShopifyApiError(message='Shopify API call failed (400): {"error":"invalid_request"}')
    )
    _install_fake(app, fake)

    response = api_client.get(
        "/shopify/auth/callback",
        params={"code": "bad_code", "shop": "example.myshopify.com", "state": "abc"},
        follow_redirects=False,
    )

    assert response.status_code == 500
    payload = response.json()
    assert "400" in payload["message"]
    assert "invalid_request" in payload["message"]
    assert fake.calls == [("example.myshopify.com", "bad_code")]


def test_callback_redirects_to_admin_apps_for_any_state(app, api_client):
    fake = FakeShopifyApi(
        result=AccessTokenResult.model_validate(
            {
                "access_token": "tok123",
                "scope": "write_pixels",
                "associated_user": {"first_name": "Ada", "last_name": "Lovelace", "email": "ada@example.com"},
            }
        )
    )
    _install_fake(app, fake)

    response = api_client.get(
        "/shopify/auth/callback",
        params={"code": "oauth_code", "shop": "example.myshopify.com", "state": "never-issued"},
        follow_redirects=False,
    )

    assert response.status_code == 302
    assert response.headers["location"] == "https://example.myshopify.com/admin/apps"
    assert response.headers[oauth_module.INSTALL_SUCCESS_HEADER] == "true"
    assert fake.calls == [("example.myshopify.com", "oauth_code")]


def test_callback_without_state_still_installs(app, api_client):
    fake = FakeShopifyApi(result=AccessTokenResult(access_token="tok123", scope="write_pixels"))
    _install_fake(app, fake)

    response = api_client.get(
        "/shopify/auth/callback",
        params={"code": "oauth_code", "shop": "example.myshopify.com"},
        follow_redirects=False,
    )

    assert response.status_code == 302


def test_build_authorize_url_encodes_query(app_settings):
    url = oauth_module.build_authorize_url(shop_domain="shop.myshopify.com", state="s1", settings=app_settings)

    assert url.startswith("https://shop.myshopify.com/admin/oauth/authorize?")
    assert "redirect_uri=https%3A%2F%2Fpixels.example.com%2Fshopify%2Fauth%2Fcallback" in url


def test_callback_reports_upstream_status_through_real_client(api_client, monkeypatch):
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(401, text="bad code")

    real_async_client = httpx.AsyncClient

    def mock_async_client(*args, **kwargs):
        return real_async_client(*args, transport=httpx.MockTransport(handler), **kwargs)

    monkeypatch.setattr(httpx, "AsyncClient", mock_async_client)

    response = api_client.get(
        "/shopify/auth/callback",
        params={"code": "expired_code", "shop": "example.myshopify.com", "state": "abc"},
        follow_redirects=False,
    )

    assert response.status_code == 500
    payload = response.json()
    assert payload["error"] == "OAuth callback failed"
    assert "(401)" in payload["message"]
    assert "bad code" in payload["message"]
    assert len(requests) == 1
    assert str(requests[0].url) == "https://example.myshopify.com/admin/oauth/access_token"


def test_callback_logs_masked_token_scopes_and_associated_user(app, api_client, caplog):
    caplog.set_level(logging.INFO, logger=oauth_module.logger.name)
    fake = FakeShopifyApi(
        result=AccessTokenResult.model_validate(
            {
                "access_token": "tok1234567890secret",
                "scope": "write_pixels,read_customer_events",
                "associated_user": {"first_name": "Ada", "last_name": "Lovelace", "email": "ada@example.com"},
            }
        )
    )
    _install_fake(app, fake)

    response = api_client.get(
        "/shopify/auth/callback",
        params={"code": "oauth_code", "shop": "example.myshopify.com"},
        follow_redirects=False,
    )

    assert response.status_code == 302
    records = [record for record in caplog.records if record.name == oauth_module.logger.name]
    installed = next(record for record in records if record.getMessage() == "Shopify app installed")
    assert installed.shop == "example.myshopify.com"
    assert installed.access_token == "tok1234567..."
    assert installed.scopes == ["write_pixels", "read_customer_events"]

    user_record = next(record for record in records if record.getMessage() == "Installed by associated user")
    assert user_record.user_name == "Ada Lovelace"
    assert user_record.user_email == "ada@example.com"

    for record in records:
        assert "tok1234567890secret" not in str(vars(record))
