"""Unit tests for the fetch state machine."""

import pytest

from src.fetch.state_machine import (
    FetchState,
    FetchStateMachine,
    FetchStateTransitionError,
)


SITE = "https://feeds.example.com/rss"


def _walk(machine: FetchStateMachine, *states: FetchState) -> None:
    for state in states:
        machine.transition_to(state)


class TestFetchState:
    """Tests for FetchState enum."""

    def test_state_count(self) -> None:
        """Verify exactly 8 states exist."""
        assert len(FetchState) == 8

    def test_values_match_names(self) -> None:
        """State values are their names."""
        for state in FetchState:
            assert state.value == state.name


class TestFetchStateMachine:
    """Tests for FetchStateMachine."""

    def test_initial_state(self) -> None:
        """State machine starts in START."""
        sm = FetchStateMachine(SITE)
        assert sm.state == FetchState.START
        assert sm.history == [FetchState.START]
        assert not sm.is_terminal

    def test_happy_path(self) -> None:
        """The full exchange ends in DONE."""
        sm = FetchStateMachine(SITE)

        _walk(
            sm,
            FetchState.LOGGED_IN,
            FetchState.REQUESTED,
            FetchState.CACHE_UPDATED,
            FetchState.LOGGED_OUT,
            FetchState.DONE,
        )

        assert sm.state == FetchState.DONE
        assert sm.is_terminal
        assert len(sm.history) == 6

    def test_auth_failure_from_start(self) -> None:
        """START -> AUTH_FAILED is valid and terminal."""
        sm = FetchStateMachine(SITE)
        sm.transition_to(FetchState.AUTH_FAILED)
        assert sm.is_terminal

    def test_transport_failure_from_requested(self) -> None:
        """REQUESTED -> TRANSPORT_FAILED is valid and terminal."""
        sm = FetchStateMachine(SITE)
        _walk(sm, FetchState.LOGGED_IN, FetchState.REQUESTED)
        sm.transition_to(FetchState.TRANSPORT_FAILED)
        assert sm.is_terminal

    def test_request_requires_login(self) -> None:
        """START -> REQUESTED is invalid."""
        sm = FetchStateMachine(SITE)

        with pytest.raises(FetchStateTransitionError) as exc_info:
            sm.transition_to(FetchState.REQUESTED)

        assert exc_info.value.from_state == FetchState.START
        assert exc_info.value.to_state == FetchState.REQUESTED
        assert SITE in str(exc_info.value)
        assert sm.state == FetchState.START

    def test_auth_failure_after_login_invalid(self) -> None:
        """LOGGED_IN -> AUTH_FAILED is invalid."""
        sm = FetchStateMachine(SITE)
        sm.transition_to(FetchState.LOGGED_IN)

        assert not sm.can_transition_to(FetchState.AUTH_FAILED)
        with pytest.raises(FetchStateTransitionError):
            sm.transition_to(FetchState.AUTH_FAILED)

    @pytest.mark.parametrize(
        "terminal",
        [FetchState.DONE, FetchState.AUTH_FAILED, FetchState.TRANSPORT_FAILED],
    )
    def test_terminal_states_have_no_exits(self, terminal: FetchState) -> None:
        """Nothing leaves a terminal state."""
        sm = FetchStateMachine(SITE, initial_state=terminal)

        assert sm.is_terminal
        for target in FetchState:
            assert not sm.can_transition_to(target)

    def test_history_is_a_copy(self) -> None:
        """Callers cannot rewrite the history."""
        sm = FetchStateMachine(SITE)
        sm.history.append(FetchState.DONE)
        assert sm.history == [FetchState.START]
