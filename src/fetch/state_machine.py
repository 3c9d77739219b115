"""State machine for one authenticated feed fetch."""

from enum import Enum

import structlog

from src.config.constants import COMPONENT_FETCH


logger = structlog.get_logger()


class FetchState(str, Enum):
    """State of a single login/fetch/logout exchange.

    - START: Nothing done yet
    - LOGGED_IN: OpenAM session obtained
    - REQUESTED: Feed request issued
    - CACHE_UPDATED: Response headers recorded (or no cache key given)
    - LOGGED_OUT: Logout attempted
    - DONE: Response handed back to the caller
    - AUTH_FAILED: Login failed; no feed request was made
    - TRANSPORT_FAILED: Feed request failed below HTTP
    """

    START = "START"
    LOGGED_IN = "LOGGED_IN"
    REQUESTED = "REQUESTED"
    CACHE_UPDATED = "CACHE_UPDATED"
    LOGGED_OUT = "LOGGED_OUT"
    DONE = "DONE"
    AUTH_FAILED = "AUTH_FAILED"
    TRANSPORT_FAILED = "TRANSPORT_FAILED"


# Valid state transitions
_VALID_TRANSITIONS: dict[FetchState, set[FetchState]] = {
    FetchState.START: {FetchState.LOGGED_IN, FetchState.AUTH_FAILED},
    FetchState.LOGGED_IN: {FetchState.REQUESTED},
    FetchState.REQUESTED: {FetchState.CACHE_UPDATED, FetchState.TRANSPORT_FAILED},
    FetchState.CACHE_UPDATED: {FetchState.LOGGED_OUT},
    FetchState.LOGGED_OUT: {FetchState.DONE},
    FetchState.DONE: set(),  # Terminal state
    FetchState.AUTH_FAILED: set(),  # Terminal state
    FetchState.TRANSPORT_FAILED: set(),  # Terminal state
}

_TERMINAL_STATES = frozenset(
    {FetchState.DONE, FetchState.AUTH_FAILED, FetchState.TRANSPORT_FAILED}
)


class FetchStateTransitionError(Exception):
    """Raised when an illegal state transition is attempted."""

    def __init__(
        self,
        site: str,
        from_state: FetchState,
        to_state: FetchState,
    ) -> None:
        """Initialize the transition error.

        Args:
            site: Feed URL being fetched.
            from_state: Current state.
            to_state: Attempted target state.
        """
        self.site = site
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Illegal fetch state transition for '{site}': "
            f"{from_state.value} -> {to_state.value}"
        )


class FetchStateMachine:
    """Tracks the lifecycle of one authenticated fetch.

    Enforces valid transitions and logs all state changes at debug level.
    """

    def __init__(
        self,
        site: str,
        initial_state: FetchState = FetchState.START,
    ) -> None:
        """Initialize the state machine.

        Args:
            site: Feed URL being fetched.
            initial_state: Starting state.
        """
        self._site = site
        self._state = initial_state
        self._history: list[FetchState] = [initial_state]
        self._log = logger.bind(component=COMPONENT_FETCH, site=site)

    @property
    def state(self) -> FetchState:
        """Get the current state."""
        return self._state

    @property
    def history(self) -> list[FetchState]:
        """States visited so far, in order."""
        return list(self._history)

    @property
    def is_terminal(self) -> bool:
        """Check if current state is terminal."""
        return self._state in _TERMINAL_STATES

    def can_transition_to(self, target: FetchState) -> bool:
        """Check if a transition to the target state is valid."""
        return target in _VALID_TRANSITIONS.get(self._state, set())

    def transition_to(self, target: FetchState) -> None:
        """Transition to a new state.

        Args:
            target: The target state.

        Raises:
            FetchStateTransitionError: If the transition is invalid.
        """
        if not self.can_transition_to(target):
            self._log.error(
                "illegal_state_transition",
                from_state=self._state.value,
                to_state=target.value,
            )
            raise FetchStateTransitionError(self._site, self._state, target)

        old_state = self._state
        self._state = target
        self._history.append(target)
        self._log.debug(
            "state_transition",
            from_state=old_state.value,
            to_state=target.value,
        )
