from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from inventsync.domain.enums.listing_status import ConnectionStatus, Marketplace


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def default_settings() -> dict[str, Any]:
    return {"autoSync": False}


@dataclass(frozen=True)
class MarketplaceCredentials:
    access_token: str
    sandbox: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {"accessToken": self.access_token, "sandbox": self.sandbox}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MarketplaceCredentials":
        return cls(
            access_token=str(data.get("accessToken") or ""),
            sandbox=bool(data.get("sandbox", True)),
        )


@dataclass
class MarketplaceConnection:
    """An authorized seller account on one marketplace. Replaced, never edited."""

    marketplace: Marketplace
    credentials: MarketplaceCredentials
    id: str = field(default_factory=lambda: str(uuid4()))
    name: str = ""
    status: ConnectionStatus = ConnectionStatus.CONNECTED
    settings: dict[str, Any] = field(default_factory=default_settings)

    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        if not self.name:
            self.name = self.marketplace.display_name

    @property
    def is_connected(self) -> bool:
        return self.status is ConnectionStatus.CONNECTED
