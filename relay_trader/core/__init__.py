"""
Core framework components for relay-trader.

This module contains the event bus, the initialization lifecycle that chains
the SDK's asynchronous setup steps, and the lifecycle's state classes.
"""

from .event_bus import EventBus
from .exceptions import (
    LifecycleError,
    StepTimeoutError,
    StepActionError,
    DuplicateSetupError,
    UnknownEventError,
    StepTableError,
)
from .lifecycle import InitLifecycle, StepDescriptor, insert_step, validate_steps
from .state import State, NotStartedState, WiredState, RunningState, CompletedState, FailedState

__all__ = [
    'EventBus',
    'InitLifecycle',
    'StepDescriptor',
    'insert_step',
    'validate_steps',
    'LifecycleError',
    'StepTimeoutError',
    'StepActionError',
    'DuplicateSetupError',
    'UnknownEventError',
    'StepTableError',
    'State',
    'NotStartedState',
    'WiredState',
    'RunningState',
    'CompletedState',
    'FailedState',
]
