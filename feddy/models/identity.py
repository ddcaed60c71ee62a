"""
Identity & SDK state snapshots.

Plain frozen dataclasses handed out by the identity store and the SDK facade.
Callers never mutate them; updates go through IdentityStore / Feddy.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class FeddyUser:
    user_id: Optional[str] = None
    email: Optional[str] = None
    name: Optional[str] = None


@dataclass(frozen=True)
class StoredConfig:
    """Configuration persisted alongside the user identity."""
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    debug_logging: bool = False


@dataclass(frozen=True)
class FeddyState:
    api_key: Optional[str]
    base_url: str
    is_configured: bool
    sdk_version: str
    user: FeddyUser = field(default_factory=FeddyUser)
