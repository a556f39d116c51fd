"""
Account-related domain models: credentials, tariffs, disk usage.
"""

import re
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Self

from mailru_cloud.core.size import Size

_MONTHS = re.compile(r"(\d+)M")
_DAYS = re.compile(r"(\d+)D")

FREE_RATE_ID = "ZERO"


class AuthState(StrEnum):
    """Lifecycle of a session manager."""

    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"


@dataclass(frozen=True)
class Credentials:
    """Login and password of a Mail.Ru account."""

    email: str
    password: str = field(repr=False)


@dataclass(frozen=True, kw_only=True)
class Duration:
    """Billing period, parsed from strings such as "1M" or "30D"."""

    months: int = 0
    days: int = 0

    @classmethod
    def parse(cls, value: str | None) -> Self:
        if not value:
            return cls()
        months = _MONTHS.search(value)
        days = _DAYS.search(value)
        return cls(
            months=int(months.group(1)) if months else 0,
            days=int(days.group(1)) if days else 0,
        )


@dataclass(frozen=True, kw_only=True)
class CostItem:
    """One price option of a tariff."""

    id: str
    cost: int
    special_cost: int
    currency: str
    duration: Duration
    special_duration: Duration


@dataclass(frozen=True, kw_only=True)
class Rate:
    """
    A tariff plan.

    The free tier has the id "ZERO" and no costs.
    """

    id: str
    name: str
    is_active: bool
    is_available: bool
    size: Size
    costs: tuple[CostItem, ...] = ()

    @property
    def is_free(self) -> bool:
        return self.id == FREE_RATE_ID


@dataclass(frozen=True, kw_only=True)
class DiskUsage:
    """Account disk usage."""

    total: Size
    used: Size

    @property
    def free(self) -> Size:
        return Size(self.total.bytes - self.used.bytes)
