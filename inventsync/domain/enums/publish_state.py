from enum import Enum


class PublishState(str, Enum):
    """Steps of a single publish attempt, in execution order."""

    ENSURING_LOCATION = "EnsuringLocation"
    UPSERTING_INVENTORY = "UpsertingInventory"
    CREATING_OFFER = "CreatingOffer"
    PUBLISHING = "Publishing"
    DONE = "Done"
    FAILED = "Failed"

    @property
    def is_terminal(self) -> bool:
        """Terminal states cannot be transitioned out of."""
        return self in (PublishState.DONE, PublishState.FAILED)
