"""
Retry policy and per-page retry state for the paginator.

``RetryPolicy`` is the configured side (one per provider, loaded from
``[providers.<name>]`` in ``config/default.toml``).  ``RetryState`` is the
runtime side: it is created per fetch, threaded through every page request,
and reset whenever a page succeeds, so the retry budget applies per cursor.

Delay formula (``attempt`` starts at 1 for the first retry)::

    exponential  → base_seconds * 2 ** (attempt - 1)
    linear       → base_seconds * attempt
    fixed        → base_seconds

The result is capped at ``max_seconds``.  With ``jitter`` enabled the delay is
scaled by a random factor in [0.75, 1.25] before the cap is applied.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

VALID_RETRY_STRATEGIES = frozenset({"exponential", "linear", "fixed"})


class RetryPolicy(BaseModel):
    """Retry policy for one provider.

    Attributes:
        strategy:     "exponential", "linear", or "fixed".
        base_seconds: Delay before the first retry.
        max_seconds:  Upper cap on any single retry delay.
        jitter:       If True, spread delays by ±25%.
        max_retries:  Retries allowed per page (0 = transient failures are
                      escalated immediately).
    """

    model_config = ConfigDict(frozen=True)

    strategy:     str   = "exponential"
    base_seconds: float = 0.25
    max_seconds:  float = 5.0
    jitter:       bool  = False
    max_retries:  int   = 0

    @field_validator("strategy")
    @classmethod
    def valid_strategy(cls, v: str) -> str:
        if v not in VALID_RETRY_STRATEGIES:
            raise ValueError(
                f"RetryPolicy.strategy must be one of {sorted(VALID_RETRY_STRATEGIES)}, got '{v}'."
            )
        return v

    @field_validator("base_seconds", "max_seconds")
    @classmethod
    def non_negative_seconds(cls, v: float) -> float:
        if v < 0.0:
            raise ValueError(f"Delay seconds must be >= 0.0, got {v}.")
        return v

    @field_validator("max_retries")
    @classmethod
    def non_negative_retries(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"max_retries must be >= 0, got {v}.")
        return v

    def delay_for(self, attempt: int, rng: Optional[random.Random] = None) -> float:
        """Return the sleep in seconds before retry number ``attempt`` (1-based)."""
        if attempt < 1 or self.base_seconds == 0.0:
            return 0.0
        if self.strategy == "exponential":
            delay = self.base_seconds * (2 ** (attempt - 1))
        elif self.strategy == "linear":
            delay = self.base_seconds * attempt
        else:
            delay = self.base_seconds
        if self.jitter:
            delay *= (rng or random).uniform(0.75, 1.25)
        return min(delay, self.max_seconds)


@dataclass
class RetryState:
    """Mutable pagination state for one fetch.

    Attributes:
        cursor:       ``start_assetid`` for the next request; ``None`` on page 1.
        retries_left: Remaining transient retries for the current cursor.
        attempt:      Retries already spent on the current cursor.
        pages:        Pages successfully consumed so far.
    """

    cursor: Optional[str]
    retries_left: int
    attempt: int = 0
    pages: int = 0

    @classmethod
    def start(cls, policy: RetryPolicy) -> "RetryState":
        return cls(cursor=None, retries_left=policy.max_retries)

    def consume_retry(self) -> int:
        """Spend one retry on the current cursor; returns the attempt number."""
        self.retries_left -= 1
        self.attempt += 1
        return self.attempt

    def advance(self, cursor: Optional[str], policy: RetryPolicy) -> None:
        """Move to the next page and restore the full retry budget."""
        self.cursor = cursor
        self.retries_left = policy.max_retries
        self.attempt = 0
        self.pages += 1
