"""
Tests for the five provider adapters — request shape and response classification.

Each adapter is driven through ``fetch_page()`` against the scripted
``FakeTransport``; no paginator is involved here.

Covers:
  - URL, query parameters and headers per provider
  - Shared 2xx rules: success / empty / malformed
  - Provider-specific failure classification (terminal vs transient)
  - Constructor validation (missing API key)
  - Community session-expiry notification
"""

from __future__ import annotations

import pytest

from steam_inventory.errors import (
    InvalidCredentialError,
    InvalidInputError,
    MalformedResponseError,
    PrivateProfileError,
    ProviderError,
    TransientProviderError,
    TransportError,
)
from steam_inventory.identity import SteamID
from steam_inventory.ingestion.base import RETRY_LATER_MESSAGE, FetchRequest, PageStatus
from steam_inventory.ingestion.community_client import CommunityInventoryClient
from steam_inventory.ingestion.rapidapi_client import RapidApiInventoryClient
from steam_inventory.ingestion.steamapis_client import SteamApisInventoryClient
from steam_inventory.ingestion.steamsupply_client import SteamSupplyInventoryClient
from steam_inventory.ingestion.webapi_client import WebApiInventoryClient

_SID64 = "76561197960287930"


def _request(api_key: str | None = "KEY123", language: str = "english") -> FetchRequest:
    return FetchRequest(
        steam_id=SteamID.parse(_SID64),
        app_id=730,
        context_id=2,
        language=language,
        api_key=api_key,
    )


# ── Shared 2xx rules (exercised through the community adapter) ────────────────

class TestSharedBodyRules:
    def test_success_page(self, fake_transport, json_response, make_page, make_asset, make_description):
        body = make_page([make_asset("1"), make_asset("2")], [make_description()],
                         more_items=True, last_assetid="2", total=10)
        fake_transport.queue(json_response(body))
        page = CommunityInventoryClient(fake_transport, _request(None)).fetch_page(None)
        assert page.status is PageStatus.SUCCESS
        assert len(page.assets) == 2
        assert page.more_items is True
        assert page.last_assetid == "2"
        assert page.total_count == 10

    def test_zero_count_is_empty(self, fake_transport, json_response):
        fake_transport.queue(json_response({"success": 1, "total_inventory_count": 0}))
        page = CommunityInventoryClient(fake_transport, _request(None)).fetch_page(None)
        assert page.status is PageStatus.EMPTY
        assert page.total_count == 0

    def test_missing_descriptions_is_malformed(self, fake_transport, json_response, make_asset):
        fake_transport.queue(
            json_response({"success": 1, "assets": [make_asset("1")], "total_inventory_count": 1})
        )
        page = CommunityInventoryClient(fake_transport, _request(None)).fetch_page(None)
        assert page.status is PageStatus.FAILED
        assert isinstance(page.error, MalformedResponseError)
        assert str(page.error) == "Malformed response"

    @pytest.mark.parametrize(
        "overrides, field",
        [
            ({"assets": [None]}, "assets"),
            ({"assets": {"1": {}}}, "assets"),
            ({"descriptions": [None]}, "descriptions"),
            ({"descriptions": "none"}, "descriptions"),
        ],
    )
    def test_non_record_lists_are_malformed(self, fake_transport, json_response, make_asset,
                                            make_description, overrides, field):
        body = {"success": 1, "assets": [make_asset("1")], "descriptions": [make_description()],
                "total_inventory_count": 1}
        body.update(overrides)
        fake_transport.queue(json_response(body))
        page = CommunityInventoryClient(fake_transport, _request(None)).fetch_page(None)
        assert page.status is PageStatus.FAILED
        assert isinstance(page.error, MalformedResponseError)
        assert field in str(page.error)

    def test_non_numeric_total_is_malformed(self, fake_transport, json_response, make_page,
                                            make_asset, make_description):
        body = make_page([make_asset("1")], [make_description()])
        body["total_inventory_count"] = "n/a"
        fake_transport.queue(json_response(body))
        page = CommunityInventoryClient(fake_transport, _request(None)).fetch_page(None)
        assert isinstance(page.error, MalformedResponseError)
        assert "total_inventory_count" in str(page.error)

    def test_numeric_string_total_accepted(self, fake_transport, json_response, make_page,
                                           make_asset, make_description):
        body = make_page([make_asset("1")], [make_description()])
        body["total_inventory_count"] = "1"
        fake_transport.queue(json_response(body))
        page = CommunityInventoryClient(fake_transport, _request(None)).fetch_page(None)
        assert page.status is PageStatus.SUCCESS
        assert page.total_count == 1

    def test_missing_success_flag_uses_body_error(self, fake_transport, json_response):
        fake_transport.queue(json_response({"success": False, "Error": "Try again later"}))
        page = CommunityInventoryClient(fake_transport, _request(None)).fetch_page(None)
        assert isinstance(page.error, MalformedResponseError)
        assert str(page.error) == "Try again later"

    def test_non_json_success_is_malformed(self, fake_transport, text_response):
        fake_transport.queue(text_response(200, "<html></html>"))
        page = CommunityInventoryClient(fake_transport, _request(None)).fetch_page(None)
        assert isinstance(page.error, MalformedResponseError)

    def test_transport_error_tagged_with_provider(self, fake_transport):
        fake_transport.queue(TransportError("connection reset"))
        client = CommunityInventoryClient(fake_transport, _request(None))
        with pytest.raises(TransportError) as exc_info:
            client.fetch_page(None)
        assert exc_info.value.provider == "community"


# ── Community ─────────────────────────────────────────────────────────────────

class TestCommunityInventoryClient:
    def test_request_shape(self, fake_transport, json_response):
        fake_transport.queue(json_response({"success": 1, "total_inventory_count": 0}))
        CommunityInventoryClient(fake_transport, _request(None, "french")).fetch_page("42")
        sent = fake_transport.requests[0]
        assert sent["url"] == f"https://steamcommunity.com/inventory/{_SID64}/730/2"
        assert sent["params"] == {"l": "french", "count": 2000, "start_assetid": "42"}
        assert sent["headers"]["Referer"] == f"https://steamcommunity.com/profiles/{_SID64}/inventory"

    def test_no_api_key_needed(self, fake_transport):
        CommunityInventoryClient(fake_transport, _request(None))

    def test_403_empty_is_private(self, fake_transport, text_response):
        fake_transport.queue(text_response(403))
        page = CommunityInventoryClient(fake_transport, _request(None)).fetch_page(None)
        assert page.status is PageStatus.FAILED
        assert isinstance(page.error, PrivateProfileError)

    def test_403_with_body_is_generic(self, fake_transport, text_response):
        fake_transport.queue(text_response(403, "Access Denied"))
        page = CommunityInventoryClient(fake_transport, _request(None)).fetch_page(None)
        assert type(page.error) is ProviderError
        assert str(page.error) == "HTTP error 403"

    def test_500_eresult_split(self, fake_transport, json_response):
        fake_transport.queue(json_response({"error": "Failure (2)"}, status_code=500))
        page = CommunityInventoryClient(fake_transport, _request(None)).fetch_page(None)
        assert isinstance(page.error, ProviderError)
        assert str(page.error) == "Failure"
        assert page.error.eresult == 2
        assert page.error.status_code == 500

    def test_500_plain_message(self, fake_transport, json_response):
        fake_transport.queue(json_response({"error": "Something broke"}, status_code=500))
        page = CommunityInventoryClient(fake_transport, _request(None)).fetch_page(None)
        assert str(page.error) == "Something broke"
        assert page.error.eresult is None

    def test_other_status(self, fake_transport, text_response):
        fake_transport.queue(text_response(502, "Bad Gateway"))
        page = CommunityInventoryClient(fake_transport, _request(None)).fetch_page(None)
        assert str(page.error) == "HTTP error 502"
        assert page.error.status_code == 502

    def test_session_expired_for_own_inventory(self, fake_transport, text_response):
        expired: list = []
        fake_transport.steam_id = SteamID.parse(_SID64)
        fake_transport.queue(text_response(403))
        client = CommunityInventoryClient(
            fake_transport, _request(None), on_session_expired=expired.append
        )
        page = client.fetch_page(None)
        assert isinstance(page.error, PrivateProfileError)
        assert len(expired) == 1
        assert isinstance(expired[0], ProviderError)

    def test_no_session_expiry_for_other_user(self, fake_transport, text_response, other_steam_id64):
        expired: list = []
        fake_transport.steam_id = SteamID.parse(other_steam_id64)
        fake_transport.queue(text_response(403))
        client = CommunityInventoryClient(
            fake_transport, _request(None), on_session_expired=expired.append
        )
        client.fetch_page(None)
        assert expired == []


# ── Web API ───────────────────────────────────────────────────────────────────

class TestWebApiInventoryClient:
    def test_requires_api_key(self, fake_transport):
        with pytest.raises(InvalidInputError, match="apiKey"):
            WebApiInventoryClient(fake_transport, _request(None))

    def test_request_shape(self, fake_transport, json_response):
        fake_transport.queue(json_response({"response": {"total_inventory_count": 0}}))
        WebApiInventoryClient(fake_transport, _request()).fetch_page(None)
        sent = fake_transport.requests[0]
        assert sent["url"].endswith("/IEconService/GetInventoryItemsWithDescriptions/v1")
        assert sent["params"]["key"] == "KEY123"
        assert sent["params"]["steamid"] == _SID64
        assert sent["params"]["appid"] == 730
        assert sent["params"]["contextid"] == 2
        assert sent["params"]["language"] == "english"
        assert sent["params"]["get_descriptions"] is True
        assert "count" not in sent["params"]

    def test_envelope_without_success_flag(self, fake_transport, json_response, make_asset, make_description):
        body = {
            "response": {
                "assets": [make_asset("1")],
                "descriptions": [make_description()],
                "total_inventory_count": 1,
            }
        }
        fake_transport.queue(json_response(body))
        page = WebApiInventoryClient(fake_transport, _request()).fetch_page(None)
        assert page.status is PageStatus.SUCCESS
        assert page.total_count == 1

    def test_empty(self, fake_transport, json_response):
        fake_transport.queue(json_response({"response": {"total_inventory_count": 0}}))
        page = WebApiInventoryClient(fake_transport, _request()).fetch_page(None)
        assert page.status is PageStatus.EMPTY

    def test_empty_envelope_is_malformed(self, fake_transport, json_response):
        fake_transport.queue(json_response({"response": {}}))
        page = WebApiInventoryClient(fake_transport, _request()).fetch_page(None)
        assert isinstance(page.error, MalformedResponseError)

    def test_403_invalid_key(self, fake_transport, text_response):
        fake_transport.queue(text_response(403, "<html>Forbidden</html>"))
        page = WebApiInventoryClient(fake_transport, _request()).fetch_page(None)
        assert isinstance(page.error, InvalidCredentialError)
        assert str(page.error) == "Invalid API key"

    def test_other_status(self, fake_transport, text_response):
        fake_transport.queue(text_response(500))
        page = WebApiInventoryClient(fake_transport, _request()).fetch_page(None)
        assert str(page.error) == "HTTP error 500"


# ── SteamApis ─────────────────────────────────────────────────────────────────

class TestSteamApisInventoryClient:
    def test_request_shape(self, fake_transport, json_response):
        fake_transport.queue(json_response({"success": 1, "total_inventory_count": 0}))
        SteamApisInventoryClient(fake_transport, _request()).fetch_page(None)
        sent = fake_transport.requests[0]
        assert sent["url"] == f"https://api.steamapis.com/steam/inventory/{_SID64}/730/2"
        assert sent["params"]["api_key"] == "KEY123"
        assert sent["params"]["count"] == 2000

    def test_404_is_transient(self, fake_transport, text_response):
        fake_transport.queue(text_response(404))
        page = SteamApisInventoryClient(fake_transport, _request()).fetch_page(None)
        assert page.status is PageStatus.TRANSIENT
        assert isinstance(page.error, TransientProviderError)
        assert page.on_exhausted.status is PageStatus.FAILED
        assert type(page.on_exhausted.error) is ProviderError
        assert str(page.on_exhausted.error) == "HTTP error 404"

    def test_retry_later_message_is_transient(self, fake_transport, json_response):
        fake_transport.queue(json_response({"error": RETRY_LATER_MESSAGE}, status_code=500))
        page = SteamApisInventoryClient(fake_transport, _request()).fetch_page(None)
        assert page.status is PageStatus.TRANSIENT
        assert str(page.on_exhausted.error) == RETRY_LATER_MESSAGE

    def test_403_is_private(self, fake_transport, text_response):
        fake_transport.queue(text_response(403))
        page = SteamApisInventoryClient(fake_transport, _request()).fetch_page(None)
        assert isinstance(page.error, PrivateProfileError)

    def test_body_error(self, fake_transport, json_response):
        fake_transport.queue(json_response({"error": "No API key"}, status_code=401))
        page = SteamApisInventoryClient(fake_transport, _request()).fetch_page(None)
        assert page.status is PageStatus.FAILED
        assert str(page.error) == "No API key"


# ── Steam.supply ──────────────────────────────────────────────────────────────

class TestSteamSupplyInventoryClient:
    def test_request_shape(self, fake_transport, json_response):
        fake_transport.queue(json_response({"success": 1, "total_inventory_count": 0}))
        SteamSupplyInventoryClient(fake_transport, _request()).fetch_page("9")
        sent = fake_transport.requests[0]
        assert sent["url"] == "https://steam.supply/API/KEY123/loadinventory"
        assert sent["params"] == {
            "l": "english",
            "steamid": _SID64,
            "appid": 730,
            "contextid": 2,
            "count": 5000,
            "start_assetid": "9",
        }

    def test_500_is_transient(self, fake_transport, text_response):
        fake_transport.queue(text_response(500))
        page = SteamSupplyInventoryClient(fake_transport, _request()).fetch_page(None)
        assert page.status is PageStatus.TRANSIENT

    def test_403_invalid_key(self, fake_transport, text_response):
        fake_transport.queue(text_response(403, "Invalid API key"))
        page = SteamSupplyInventoryClient(fake_transport, _request()).fetch_page(None)
        assert isinstance(page.error, InvalidCredentialError)

    def test_403_private(self, fake_transport, text_response):
        fake_transport.queue(text_response(403, "Inventory Private"))
        page = SteamSupplyInventoryClient(fake_transport, _request()).fetch_page(None)
        assert isinstance(page.error, PrivateProfileError)

    def test_text_body_becomes_message(self, fake_transport, text_response):
        fake_transport.queue(text_response(400, "Unknown app"))
        page = SteamSupplyInventoryClient(fake_transport, _request()).fetch_page(None)
        assert str(page.error) == "Unknown app"

    def test_html_success_is_transient_then_malformed(self, fake_transport, text_response):
        fake_transport.queue(text_response(200, "<html>redirecting</html>"))
        page = SteamSupplyInventoryClient(fake_transport, _request()).fetch_page(None)
        assert page.status is PageStatus.TRANSIENT
        assert isinstance(page.on_exhausted.error, MalformedResponseError)

    def test_fake_redirect_is_transient(self, fake_transport, json_response):
        fake_transport.queue(json_response({"fake_redirect": True}))
        page = SteamSupplyInventoryClient(fake_transport, _request()).fetch_page(None)
        assert page.status is PageStatus.TRANSIENT

    def test_valid_page(self, fake_transport, json_response, make_page, make_asset, make_description):
        fake_transport.queue(json_response(make_page([make_asset("1")], [make_description()])))
        page = SteamSupplyInventoryClient(fake_transport, _request()).fetch_page(None)
        assert page.status is PageStatus.SUCCESS


# ── RapidAPI ──────────────────────────────────────────────────────────────────

class TestRapidApiInventoryClient:
    def test_request_shape(self, fake_transport, json_response):
        fake_transport.queue(json_response({"success": 1, "total_inventory_count": 0}))
        RapidApiInventoryClient(fake_transport, _request()).fetch_page(None)
        sent = fake_transport.requests[0]
        assert sent["url"] == f"https://steamdata1.p.rapidapi.com/inventory/{_SID64}/730/2"
        assert sent["headers"] == {
            "X-RapidAPI-Key": "KEY123",
            "X-RapidAPI-Host": "steamdata1.p.rapidapi.com",
        }
        assert sent["params"]["count"] == 5000

    def test_429_without_body_is_transient(self, fake_transport, text_response):
        fake_transport.queue(text_response(429))
        page = RapidApiInventoryClient(fake_transport, _request()).fetch_page(None)
        assert page.status is PageStatus.TRANSIENT
        assert str(page.on_exhausted.error) == "HTTP error 429"

    def test_gateway_timeout_is_transient(self, fake_transport, json_response):
        body = {"messages": "error", "info": "The API took too long to respond"}
        fake_transport.queue(json_response(body, status_code=504))
        page = RapidApiInventoryClient(fake_transport, _request()).fetch_page(None)
        assert page.status is PageStatus.TRANSIENT

    def test_retry_later_is_transient(self, fake_transport, json_response):
        fake_transport.queue(json_response({"error": RETRY_LATER_MESSAGE}, status_code=500))
        page = RapidApiInventoryClient(fake_transport, _request()).fetch_page(None)
        assert page.status is PageStatus.TRANSIENT

    def test_forbidden_message_is_invalid_credential(self, fake_transport, json_response):
        fake_transport.queue(json_response({"message": "Forbidden"}, status_code=403))
        page = RapidApiInventoryClient(fake_transport, _request()).fetch_page(None)
        assert isinstance(page.error, InvalidCredentialError)
        assert str(page.error) == "Forbidden"

    def test_403_is_private(self, fake_transport, text_response):
        fake_transport.queue(text_response(403))
        page = RapidApiInventoryClient(fake_transport, _request()).fetch_page(None)
        assert isinstance(page.error, PrivateProfileError)

    def test_body_error(self, fake_transport, json_response):
        fake_transport.queue(json_response({"error": "Bad steamid"}, status_code=400))
        page = RapidApiInventoryClient(fake_transport, _request()).fetch_page(None)
        assert str(page.error) == "Bad steamid"

    def test_504_other_body_is_terminal(self, fake_transport, json_response):
        fake_transport.queue(json_response({"info": "upstream error"}, status_code=504))
        page = RapidApiInventoryClient(fake_transport, _request()).fetch_page(None)
        assert page.status is PageStatus.FAILED
        assert str(page.error) == "HTTP error 504"
