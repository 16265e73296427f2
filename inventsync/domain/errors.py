"""Domain exception taxonomy.

The API layer maps each type onto an HTTP status; nothing below the API
knows about HTTP.
"""


class InventSyncError(Exception):
    """Base class for every error the application surfaces to callers."""


class ValidationError(InventSyncError):
    """A required field is missing or a value is out of range."""


class ConflictError(InventSyncError):
    """A uniqueness rule was violated (duplicate SKU)."""


class NotFoundError(InventSyncError):
    def __init__(self, entity: str, entity_id: str) -> None:
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found")


class AuthenticationError(InventSyncError):
    """The marketplace rejected the supplied access token."""


class PreconditionError(InventSyncError):
    """The operation needs state that does not exist yet (no connection)."""


class MarketplaceError(InventSyncError):
    """A remote marketplace call failed; carries the normalized remote message."""


class LocationError(MarketplaceError):
    """The default fulfillment location could not be found or created."""
