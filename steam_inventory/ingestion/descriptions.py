"""
Per-fetch description lookup.

Providers return each page as two parallel lists: ``assets`` (what the user
owns) and ``descriptions`` (static metadata shared by every asset with the
same ``classid``/``instanceid``).  ``DescriptionIndex`` joins them.

The index is lazy: a page's description list is only scanned when a lookup
misses, and every entry of that list is absorbed at once, so the scan happens
at most once per page in practice.  Absorbing the same list twice is harmless
(last write wins per key).  One index lives for exactly one fetch.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional


def description_key(classid: Any, instanceid: Any) -> str:
    """Build the ``"<classid>_<instanceid>"`` key; a missing instance id is ``"0"``."""
    return f"{classid}_{instanceid or '0'}"


class DescriptionIndex:
    """In-memory ``(classid, instanceid) -> description`` map for one fetch."""

    def __init__(self) -> None:
        self._by_key: dict[str, dict[str, Any]] = {}

    def __len__(self) -> int:
        return len(self._by_key)

    def __contains__(self, key: str) -> bool:
        return key in self._by_key

    def absorb(self, descriptions: Iterable[dict[str, Any]]) -> None:
        for desc in descriptions:
            self._by_key[description_key(desc.get("classid"), desc.get("instanceid"))] = desc

    def resolve(
        self,
        descriptions: Iterable[dict[str, Any]],
        classid: Any,
        instanceid: Any,
    ) -> Optional[dict[str, Any]]:
        """Return the description for ``(classid, instanceid)``, or ``None``.

        On a miss, ``descriptions`` (the current page's list) is absorbed and
        the lookup is retried.
        """
        key = description_key(classid, instanceid)
        found = self._by_key.get(key)
        if found is not None:
            return found
        self.absorb(descriptions)
        return self._by_key.get(key)
