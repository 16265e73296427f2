from dataclasses import dataclass, field
from typing import Any

from inventsync.domain.enums.publish_state import PublishState


@dataclass(frozen=True)
class PublishResult:
    """
    Terminal outcome of one publish attempt.

    Serialized verbatim into the listing's listing_data column.
    """

    success: bool
    listing_id: str | None = None
    offer_id: str | None = None
    listing_url: str | None = None
    error: str | None = None
    failed_at: PublishState | None = None
    trail: tuple[PublishState, ...] = field(default_factory=tuple)

    @property
    def orphaned_offer_id(self) -> str | None:
        """Offer created remotely but never published; nothing deletes it."""
        if self.success or self.failed_at is not PublishState.PUBLISHING:
            return None
        return self.offer_id

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"success": self.success}
        if self.listing_id is not None:
            data["listingId"] = self.listing_id
        if self.offer_id is not None:
            data["offerId"] = self.offer_id
        if self.listing_url is not None:
            data["listingUrl"] = self.listing_url
        if self.error is not None:
            data["error"] = self.error
        if self.failed_at is not None:
            data["failedAt"] = self.failed_at.value
        data["states"] = [s.value for s in self.trail]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PublishResult":
        failed_at = data.get("failedAt")
        return cls(
            success=bool(data.get("success", False)),
            listing_id=data.get("listingId"),
            offer_id=data.get("offerId"),
            listing_url=data.get("listingUrl"),
            error=data.get("error"),
            failed_at=PublishState(failed_at) if failed_at else None,
            trail=tuple(PublishState(s) for s in data.get("states", [])),
        )
