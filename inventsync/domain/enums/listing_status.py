from enum import Enum


class ListingStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    ERROR = "error"


class ConnectionStatus(str, Enum):
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"


class Marketplace(str, Enum):
    EBAY = "ebay"

    @property
    def display_name(self) -> str:
        return {Marketplace.EBAY: "eBay Store"}[self]
