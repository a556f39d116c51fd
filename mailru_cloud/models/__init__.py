"""
Domain models for Mail.Ru Cloud.

These are immutable (frozen) dataclasses representing the core domain concepts.
"""

from mailru_cloud.models.account import (
    FREE_RATE_ID,
    AuthState,
    CostItem,
    Credentials,
    DiskUsage,
    Duration,
    Rate,
)
from mailru_cloud.models.entries import CloudEntry, CloudFile, CloudFolder, EntryKind, History
from mailru_cloud.models.shards import ShardClass, ShardInfo, ShardMap

__all__ = [
    # Account
    "AuthState",
    "Credentials",
    "DiskUsage",
    "Rate",
    "CostItem",
    "Duration",
    "FREE_RATE_ID",
    # Entries
    "EntryKind",
    "CloudEntry",
    "CloudFile",
    "CloudFolder",
    "History",
    # Shards
    "ShardClass",
    "ShardInfo",
    "ShardMap",
]
