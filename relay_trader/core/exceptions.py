from typing import Hashable


class LifecycleError(Exception):
    """Base class for initialization lifecycle failures"""
    pass


class StepTimeoutError(LifecycleError, TimeoutError):
    """A promise() wait outlived the configured timeout"""

    def __init__(self, event: Hashable, timeout_ms: float):
        super().__init__(f"Timed out after {timeout_ms}ms waiting for event '{_name(event)}'")
        self.event = event
        self.timeout_ms = timeout_ms


class StepActionError(LifecycleError):
    """The action of a step raised; the original exception is chained as __cause__"""

    def __init__(self, event: Hashable, cause: BaseException):
        super().__init__(f"Step completing '{_name(event)}' failed: {cause!r}")
        self.event = event
        self.cause = cause


class DuplicateSetupError(LifecycleError):
    pass


class UnknownEventError(LifecycleError, KeyError):
    def __init__(self, event: Hashable):
        super().__init__(f"Event '{_name(event)}' is not part of the step table")
        self.event = event

    def __str__(self):
        return self.args[0]


class StepTableError(LifecycleError, ValueError):
    pass


def _name(event: Hashable) -> str:
    return getattr(event, "value", event)
