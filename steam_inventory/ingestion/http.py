"""
Shared HTTP transport for all inventory providers.

One ``HttpTransport`` wraps one ``httpx.Client`` and is shared by every fetch
a ``SteamInventory`` / ``InventoryFetcher`` runs, so the cookie jar and the
connection pool are shared too.  ``httpx.Client`` is safe to use from several
threads at once.

Contract the provider adapters rely on:
  - ``get()`` never raises for an HTTP error status; adapters need the status
    code and the body together to classify failures.
  - ``HttpResponse.body`` is the parsed JSON value, or ``None`` when the body
    is empty or is not JSON (``text`` still holds the raw body).
  - Network and timeout failures raise ``TransportError``.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from http.cookiejar import Cookie
from typing import Any, Mapping, Optional

import httpx

from steam_inventory.config import HttpConfig
from steam_inventory.errors import TransportError
from steam_inventory.identity import SteamID

logger = logging.getLogger(__name__)

STEAM_COOKIE_DOMAINS: tuple[str, ...] = (
    "steamcommunity.com",
    "store.steampowered.com",
    "help.steampowered.com",
)
DEFAULT_COOKIES: tuple[str, ...] = ("Steam_Language=english", "timezoneOffset=0,0")

_LOGIN_COOKIES = frozenset({"steamLogin", "steamLoginSecure"})


@dataclass(frozen=True)
class HttpResponse:
    """Status, parsed body and raw text of one HTTP exchange."""

    status_code: int
    body: Any
    text: str
    url: str = ""

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code <= 299

    @property
    def is_json(self) -> bool:
        return self.body is not None

    @property
    def error_message(self) -> str:
        return f"HTTP error {self.status_code}"


def is_secure_cookie(name: str) -> bool:
    """Login and machine-auth cookies are only ever sent over HTTPS."""
    return name.startswith("steamMachineAuth") or name.endswith("Secure")


def _parse_body(text: str) -> Any:
    if not text or not text.strip():
        return None
    try:
        return json.loads(text)
    except ValueError:
        return None


def _clean_params(params: Optional[Mapping[str, Any]]) -> dict[str, Any]:
    """Drop ``None`` values so unset query parameters are omitted entirely."""
    cleaned: dict[str, Any] = {}
    for key, val in (params or {}).items():
        if val is None:
            continue
        cleaned[key] = "true" if val is True else "false" if val is False else val
    return cleaned


class HttpTransport:
    """Cookie-sharing GET transport over ``httpx.Client``.

    Args:
        config: Timeout, user agent and local address settings.
        client: Pre-built ``httpx.Client`` (tests pass one backed by
            ``httpx.MockTransport``). When given, ``config`` only supplies the
            user agent header.
    """

    def __init__(
        self,
        config: Optional[HttpConfig] = None,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.config = config or HttpConfig()
        if client is None:
            transport = None
            if self.config.local_address:
                transport = httpx.HTTPTransport(local_address=self.config.local_address)
            client = httpx.Client(
                timeout=self.config.timeout_seconds,
                transport=transport,
                follow_redirects=True,
            )
        self._client = client
        self._client.headers["User-Agent"] = self.config.user_agent
        self.steam_id: Optional[SteamID] = None
        for cookie in DEFAULT_COOKIES:
            self._set_cookie(cookie)

    # ── Cookies ────────────────────────────────────────────────────────────────

    @property
    def cookies(self) -> httpx.Cookies:
        return self._client.cookies

    def _set_cookie(self, cookie: str) -> None:
        name, _, value = cookie.partition("=")
        name = name.strip()
        if not name:
            raise ValueError(f"Malformed cookie: {cookie!r}")
        value = value.split(";", 1)[0].strip()
        secure = is_secure_cookie(name)
        for domain in STEAM_COOKIE_DOMAINS:
            self._client.cookies.jar.set_cookie(
                Cookie(
                    version=0, name=name, value=value,
                    port=None, port_specified=False,
                    domain=domain, domain_specified=True, domain_initial_dot=False,
                    path="/", path_specified=True,
                    secure=secure, expires=None, discard=True,
                    comment=None, comment_url=None, rest={"HttpOnly": None},
                )
            )

    def set_cookies(self, cookies: list[str]) -> None:
        """Store ``name=value`` cookies for every Steam domain.

        A ``steamLogin`` / ``steamLoginSecure`` cookie also records which
        account this session belongs to (its value starts with the SteamID64).
        """
        for cookie in cookies:
            name = cookie.split("=", 1)[0].strip()
            if name in _LOGIN_COOKIES:
                match = re.search(r"=(\d+)", cookie)
                if match:
                    self.steam_id = SteamID.parse(match.group(1))
            self._set_cookie(cookie)

    # ── Requests ───────────────────────────────────────────────────────────────

    def get(
        self,
        url: str,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> HttpResponse:
        """Issue a GET and return status + body, whatever the status code.

        Raises:
            TransportError: On connection failures, timeouts, or other httpx
                transport-level errors.
        """
        try:
            resp = self._client.get(url, params=_clean_params(params), headers=headers)
        except httpx.TimeoutException as exc:
            raise TransportError(f"Request timed out: {exc}", original_exception=exc) from exc
        except httpx.HTTPError as exc:
            raise TransportError(str(exc) or exc.__class__.__name__, original_exception=exc) from exc

        text = resp.text
        logger.debug("GET %s -> %d (%d bytes)", resp.request.url, resp.status_code, len(text))
        return HttpResponse(
            status_code=resp.status_code,
            body=_parse_body(text),
            text=text,
            url=str(resp.request.url),
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "HttpTransport":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
