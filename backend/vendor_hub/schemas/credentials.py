"""
Credential schemas — stored platform credential and the per-publish lease.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict


class Credential(BaseModel):
    """One access token per storefront. Replaced whole on refresh."""

    model_config = ConfigDict(frozen=True)

    storefront_id: str
    secret_value: str
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now

    def to_row(self) -> Dict[str, Any]:
        return {
            "storefront_id": self.storefront_id,
            "access_token": self.secret_value,
            "expires_at": self.expires_at.isoformat(),
        }

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Credential":
        expires_at = row["expires_at"]
        if isinstance(expires_at, str):
            expires_at = datetime.fromisoformat(expires_at.replace("Z", "+00:00"))
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return cls(
            storefront_id=row["storefront_id"],
            secret_value=row["access_token"],
            expires_at=expires_at,
        )

    def __repr__(self) -> str:
        return (
            f"Credential(storefront_id={self.storefront_id!r}, "
            f"secret_value='{redact(self.secret_value)}', expires_at={self.expires_at.isoformat()})"
        )

    def __str__(self) -> str:
        return self.__repr__()


@dataclass
class CredentialLease:
    """
    Credential handle shared by every call of one publish invocation.

    Only the secret is exposed. The request executor swaps the secret in
    place after a 401-triggered refresh so that the remaining calls of the
    invocation use the new credential rather than the stale one.
    """

    storefront_id: str
    secret: str

    def __repr__(self) -> str:
        return f"CredentialLease(storefront_id={self.storefront_id!r}, secret='{redact(self.secret)}')"


def redact(secret: str | None, visible: int = 8) -> str:
    """First characters of a secret for log lines."""
    if not secret:
        return ""
    return f"{secret[:visible]}..."
