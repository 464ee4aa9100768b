"""
Shared pytest fixtures for the steam-inventory test suite.

Provides:
  - ``fake_transport``: a scripted stand-in for ``HttpTransport`` that returns
    queued ``HttpResponse`` objects and records every request.
  - Raw provider payload builders (assets, descriptions, pages, responses).
  - ``no_sleep``: a recorder to pass wherever a sleep function is injectable.

No test touches the network.
"""

from __future__ import annotations

import json
from typing import Any, Callable, Optional, Union

import pytest

from steam_inventory.ingestion.http import HttpResponse

STEAM_ID64 = "76561197960287930"
OTHER_STEAM_ID64 = "76561197960287931"


# ── Fake transport ────────────────────────────────────────────────────────────

Scripted = Union[HttpResponse, BaseException, Callable[[], Any]]


class FakeTransport:
    """Returns scripted responses in order and records each GET.

    A scripted entry may be an ``HttpResponse``, an exception instance (raised
    from ``get``), or a zero-argument callable whose return value is used the
    same way (handy for cancelling a token mid-fetch).
    """

    def __init__(self) -> None:
        self.responses: list[Scripted] = []
        self.requests: list[dict[str, Any]] = []
        self.steam_id = None

    def queue(self, *responses: Scripted) -> "FakeTransport":
        self.responses.extend(responses)
        return self

    def get(self, url, params=None, headers=None) -> HttpResponse:
        self.requests.append(
            {"url": url, "params": dict(params or {}), "headers": dict(headers or {})}
        )
        if not self.responses:
            raise AssertionError(f"Unexpected request to {url}")
        entry = self.responses.pop(0)
        if callable(entry) and not isinstance(entry, HttpResponse):
            entry = entry()
        if isinstance(entry, BaseException):
            raise entry
        return entry

    def cursors(self) -> list[Optional[str]]:
        return [r["params"].get("start_assetid") for r in self.requests]


@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def no_sleep() -> list:
    """A list that doubles as a sleep function recorder via ``no_sleep.append``."""
    return []


# ── Payload builders ──────────────────────────────────────────────────────────

def _make_asset(
    assetid: str,
    classid: str = "100",
    instanceid: str = "0",
    amount: str = "1",
    appid: int = 730,
    contextid: str = "2",
) -> dict[str, Any]:
    return {
        "appid": appid,
        "contextid": contextid,
        "assetid": assetid,
        "classid": classid,
        "instanceid": instanceid,
        "amount": amount,
    }


def _make_description(
    classid: str = "100",
    instanceid: str = "0",
    *,
    tradable: int = 1,
    name: Optional[str] = None,
    appid: int = 730,
    **extra: Any,
) -> dict[str, Any]:
    label = name or f"Item {classid}"
    desc = {
        "appid": appid,
        "classid": classid,
        "instanceid": instanceid,
        "name": label,
        "market_name": label,
        "market_hash_name": label,
        "type": "Mil-Spec Grade Rifle",
        "icon_url": f"icon-{classid}",
        "tradable": tradable,
        "marketable": 1,
        "commodity": 0,
        "market_tradable_restriction": 7,
        "market_marketable_restriction": 7,
        "descriptions": [{"type": "html", "value": "Exterior: Field-Tested"}],
        "tags": [
            {
                "category": "Rarity",
                "internal_name": "Rarity_Rare_Weapon",
                "localized_category_name": "Quality",
                "localized_tag_name": "Mil-Spec Grade",
                "color": "4b69ff",
            }
        ],
    }
    desc.update(extra)
    return desc


def _make_page(
    assets: list[dict[str, Any]],
    descriptions: list[dict[str, Any]],
    *,
    more_items: bool = False,
    last_assetid: Optional[str] = None,
    total: Optional[int] = None,
) -> dict[str, Any]:
    body: dict[str, Any] = {
        "success": 1,
        "assets": assets,
        "descriptions": descriptions,
        "total_inventory_count": total if total is not None else len(assets),
        "rwgrsn": -2,
    }
    if more_items:
        body["more_items"] = 1
        if last_assetid is not None:
            body["last_assetid"] = last_assetid
    return body


def _json_response(body: Any, status_code: int = 200) -> HttpResponse:
    return HttpResponse(status_code=status_code, body=body, text=json.dumps(body))


def _text_response(status_code: int, text: str = "") -> HttpResponse:
    return HttpResponse(status_code=status_code, body=None, text=text)


@pytest.fixture
def make_asset():
    return _make_asset


@pytest.fixture
def make_description():
    return _make_description


@pytest.fixture
def make_page():
    return _make_page


@pytest.fixture
def json_response():
    return _json_response


@pytest.fixture
def text_response():
    return _text_response


@pytest.fixture
def steam_id64() -> str:
    return STEAM_ID64


@pytest.fixture
def other_steam_id64() -> str:
    return OTHER_STEAM_ID64
