####################
## State Patterns ##
####################

from abc import ABC, abstractmethod
from typing import FrozenSet, Optional, Type


class State(ABC):
    name: str = ""
    # States this one may move to; empty for terminal states
    transitions: FrozenSet[Type["State"]] = frozenset()

    @abstractmethod
    def execute(self, lifecycle, **kwargs):
        pass

    def can_transition_to(self, state: "State") -> bool:
        return type(state) in self.transitions

    @property
    def is_terminal(self) -> bool:
        return not self.transitions

    def __repr__(self):
        return f"{type(self).__name__}()"


class NotStartedState(State):
    """
    Lifecycle constructed, no listeners wired yet.
    """
    name = "NotStarted"

    def execute(self, lifecycle, **kwargs):
        lifecycle.logger.debug("Init lifecycle created.")


class WiredState(State):
    """
    Steps bound to their owner and listening for trigger events.
    """
    name = "Wired"

    def execute(self, lifecycle, **kwargs):
        owner = kwargs.get("owner")
        lifecycle.logger.info(f"Init lifecycle wired to {type(owner).__name__} with {len(lifecycle.steps)} steps.")


class RunningState(State):
    name = "Running"

    def execute(self, lifecycle, **kwargs):
        lifecycle.logger.info("Init lifecycle is running.")


class CompletedState(State):
    name = "Completed"

    def execute(self, lifecycle, **kwargs):
        lifecycle.logger.info(f"Init lifecycle completed on '{lifecycle.terminal_event}'.")


class FailedState(State):
    """
    A step failed or timed out. The forward chain never resumes.
    """
    name = "Failed"

    def __init__(self, reason: Optional[BaseException] = None):
        self.reason = reason

    def execute(self, lifecycle, **kwargs):
        lifecycle.logger.error(f"Init lifecycle failed: {self.reason!r}")

    def __repr__(self):
        return f"FailedState({self.reason!r})"


NotStartedState.transitions = frozenset({WiredState})
WiredState.transitions = frozenset({RunningState, FailedState})
RunningState.transitions = frozenset({CompletedState, FailedState})
