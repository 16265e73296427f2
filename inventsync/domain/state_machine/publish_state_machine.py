from inventsync.domain.enums.publish_state import PublishState

_FAILED = frozenset({PublishState.FAILED})

# Mapping of valid transitions: from_state -> set of allowed to_states.
# Every remote step may fail; there is no path back to an earlier step.
VALID_TRANSITIONS: dict[PublishState, frozenset[PublishState]] = {
    PublishState.ENSURING_LOCATION: frozenset({PublishState.UPSERTING_INVENTORY}) | _FAILED,
    PublishState.UPSERTING_INVENTORY: frozenset({PublishState.CREATING_OFFER}) | _FAILED,
    PublishState.CREATING_OFFER: frozenset({PublishState.PUBLISHING}) | _FAILED,
    PublishState.PUBLISHING: frozenset({PublishState.DONE}) | _FAILED,
    # Terminal states: no valid outgoing transitions
    PublishState.DONE: frozenset(),
    PublishState.FAILED: frozenset(),
}

INITIAL_STATE = PublishState.ENSURING_LOCATION


class InvalidPublishTransitionError(Exception):
    """Raised when the publish workflow attempts an out-of-order step."""

    def __init__(self, from_state: PublishState, to_state: PublishState) -> None:
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Invalid transition from {from_state.value} to {to_state.value}. "
            f"Allowed transitions: {sorted(s.value for s in VALID_TRANSITIONS.get(from_state, frozenset()))}"
        )


class PublishStateMachine:
    """
    Tracks one publish attempt through its ordered steps.

    Unlike a stateless validator, each instance holds the current state and
    the trail of states visited so far, so a finished attempt can report
    exactly where it stopped.
    """

    def __init__(self) -> None:
        self._state = INITIAL_STATE
        self._trail: list[PublishState] = [INITIAL_STATE]
        self._failed_at: PublishState | None = None

    @property
    def state(self) -> PublishState:
        return self._state

    @property
    def trail(self) -> list[PublishState]:
        return list(self._trail)

    @property
    def failed_at(self) -> PublishState | None:
        """The step that was running when the attempt failed, if it did."""
        return self._failed_at

    @staticmethod
    def can_transition(from_state: PublishState, to_state: PublishState) -> bool:
        if from_state.is_terminal:
            return False
        return to_state in VALID_TRANSITIONS.get(from_state, frozenset())

    def advance(self, to_state: PublishState) -> None:
        """Move to to_state, raising InvalidPublishTransitionError if not permitted."""
        if not self.can_transition(self._state, to_state):
            raise InvalidPublishTransitionError(self._state, to_state)
        if to_state is PublishState.FAILED:
            self._failed_at = self._state
        self._state = to_state
        self._trail.append(to_state)

    def fail(self) -> None:
        self.advance(PublishState.FAILED)
