"""
SteamID parsing — turns user-supplied identity strings into a 64-bit id.

Accepted forms (individual accounts, public universe)::

    76561197960287930        64-bit decimal (str or int)
    STEAM_0:0:11101          Steam2 text id (universe digit ignored)
    [U:1:22202]              Steam3 text id

Anything else raises ``ValueError``.  Inventory URLs only ever need the 64-bit
form, exposed as ``SteamID.get_steam_id64()``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Union

# 64-bit id of account number 0 in the public universe, individual type,
# desktop instance: (1 << 56) | (1 << 52) | (1 << 32).
_INDIVIDUAL_BASE = 0x0110000100000000
_ACCOUNT_ID_MAX = 0xFFFFFFFF

_STEAM2_RE = re.compile(r"^STEAM_([0-5]):([01]):(\d+)$")
_STEAM3_RE = re.compile(r"^\[U:1:(\d+)\]$")


@dataclass(frozen=True)
class SteamID:
    """An individual Steam account identity.

    Attributes:
        steam_id64: The 64-bit numeric id.
    """

    steam_id64: int

    @property
    def account_id(self) -> int:
        return self.steam_id64 & _ACCOUNT_ID_MAX

    def get_steam_id64(self) -> str:
        return str(self.steam_id64)

    def steam3(self) -> str:
        return f"[U:1:{self.account_id}]"

    def __str__(self) -> str:
        return self.get_steam_id64()

    @classmethod
    def parse(cls, value: Union[str, int, "SteamID"]) -> "SteamID":
        """Parse ``value`` into a ``SteamID``.

        Raises:
            ValueError: If ``value`` is not a recognisable individual SteamID.
        """
        if isinstance(value, SteamID):
            return value
        if isinstance(value, bool):
            raise ValueError(f"Invalid SteamID: {value!r}")
        if isinstance(value, int):
            return cls._from_int(value, value)

        text = str(value).strip()
        if text.isdigit():
            return cls._from_int(int(text), value)

        match = _STEAM2_RE.match(text)
        if match:
            y, z = int(match.group(2)), int(match.group(3))
            return cls._from_account(z * 2 + y, value)

        match = _STEAM3_RE.match(text)
        if match:
            return cls._from_account(int(match.group(1)), value)

        raise ValueError(f"Invalid SteamID: {value!r}")

    @classmethod
    def _from_account(cls, account_id: int, original: object) -> "SteamID":
        if account_id <= 0 or account_id > _ACCOUNT_ID_MAX:
            raise ValueError(f"Invalid SteamID: {original!r}")
        return cls(_INDIVIDUAL_BASE + account_id)

    @classmethod
    def _from_int(cls, number: int, original: object) -> "SteamID":
        # Bare account ids are not accepted; only full 64-bit individual ids.
        if number & ~_ACCOUNT_ID_MAX != _INDIVIDUAL_BASE:
            raise ValueError(f"Invalid SteamID: {original!r}")
        return cls._from_account(number & _ACCOUNT_ID_MAX, original)


def parse_steam_id(value: Union[str, int, SteamID, None]) -> SteamID:
    """Functional alias of ``SteamID.parse`` that also rejects ``None``/empty."""
    if value is None or value == "":
        raise ValueError("The user's SteamID is invalid or missing.")
    return SteamID.parse(value)
