"""
Identity Store — Persistent API key and user identity.
=======================================================

Stores the configured API key, base URL, debug flag and the user identity
(user id, email, name) in <data_dir>/identity.json with atomic writes
(tmp + fsync + rename) and chmod 600.

A random user id is generated and persisted the first time one is needed
and again whenever user data is cleared.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import uuid
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Optional

from feddy.config import settings
from feddy.models.identity import FeddyUser, StoredConfig

logger = logging.getLogger(__name__)


@dataclass
class IdentityRecord:
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    debug_logging: bool = False
    user_id: Optional[str] = None
    user_email: Optional[str] = None
    user_name: Optional[str] = None


def generate_user_id() -> str:
    return str(uuid.uuid4())


class IdentityStore:
    """Persistent identity backed by a JSON file with atomic writes."""

    def __init__(self, path: Optional[str] = None):
        self._path = Path(path or settings.identity_path())
        self._record = IdentityRecord()
        self._load()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> None:
        if not self._path.exists():
            logger.debug("No identity file at %s, starting empty", self._path)
            return
        try:
            raw = json.loads(self._path.read_text())
            self._record = IdentityRecord(
                api_key=raw.get("api_key") or None,
                base_url=raw.get("base_url") or None,
                debug_logging=bool(raw.get("debug_logging", False)),
                user_id=raw.get("user_id") or None,
                user_email=raw.get("user_email"),
                user_name=raw.get("user_name"),
            )
        except (OSError, ValueError, AttributeError) as e:
            logger.error("Failed to load identity file %s: %s, starting empty", self._path, e)

    def save(self) -> None:
        """Atomic write: tmp -> fsync -> rename. chmod 600."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        data = asdict(self._record)
        fd, tmp_path = tempfile.mkstemp(dir=str(self._path.parent), suffix=".tmp")
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(data, f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp_path, 0o600)
            os.replace(tmp_path, str(self._path))
        except Exception:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise

    # --- Configuration ---

    def get_config(self) -> StoredConfig:
        return StoredConfig(
            api_key=self._record.api_key,
            base_url=self._record.base_url or settings.base_url,
            debug_logging=self._record.debug_logging,
        )

    def set_config(self, api_key: str, base_url: Optional[str] = None, debug_logging: bool = False) -> None:
        self._record.api_key = api_key
        self._record.base_url = base_url
        self._record.debug_logging = debug_logging
        self.save()

    # --- User ---

    def ensure_user_id(self) -> str:
        if not self._record.user_id:
            self._record.user_id = generate_user_id()
            self.save()
            logger.info("Generated new Feddy user id")
        return self._record.user_id

    def get_user(self) -> FeddyUser:
        return FeddyUser(
            user_id=self.ensure_user_id(),
            email=self._record.user_email,
            name=self._record.user_name,
        )

    def set_user(
        self,
        user_id: Optional[str] = None,
        email: Optional[str] = None,
        name: Optional[str] = None,
    ) -> FeddyUser:
        """Partial update. None leaves a field untouched; an empty user_id regenerates it."""
        if user_id is not None:
            self._record.user_id = user_id or generate_user_id()
        if email is not None:
            self._record.user_email = email
        if name is not None:
            self._record.user_name = name
        self.save()
        return self.get_user()

    def clear_user(self) -> FeddyUser:
        self._record.user_id = None
        self._record.user_email = None
        self._record.user_name = None
        self.save()
        return self.get_user()

    def has_persisted_user(self) -> bool:
        return bool(self._record.user_id or self._record.user_email or self._record.user_name)
