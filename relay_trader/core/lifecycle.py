##############################
## Initialization Lifecycle ##
##############################

from __future__ import annotations
import asyncio
import functools
import inspect
import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, Hashable, List, Optional, Sequence, Set, Tuple

from relay_trader.core.event_bus import EventBus
from relay_trader.core.exceptions import (
    DuplicateSetupError,
    LifecycleError,
    StepActionError,
    StepTableError,
    StepTimeoutError,
    UnknownEventError,
)
from relay_trader.core.state import (
    CompletedState,
    FailedState,
    NotStartedState,
    RunningState,
    State,
    WiredState,
)
from relay_trader.utils.enums import SlotState, StepStatus

StepAction = Callable[..., Any]


@dataclass(frozen=True)
class StepDescriptor:
    """
    One initialization step.

    `action` is a free function called as ``action(owner, *args)`` once
    `trigger_event` has been observed. The owner announces completion by
    emitting `completion_event`; the lifecycle never emits it.
    """
    completion_event: Hashable
    action: StepAction
    trigger_event: Optional[Hashable] = None
    args: Tuple[Any, ...] = ()

    @property
    def name(self) -> str:
        return getattr(self.action, "__name__", repr(self.action))


def validate_steps(steps: Sequence[StepDescriptor]):
    if not steps:
        raise StepTableError("Step table is empty")

    seen: Set[Hashable] = set()
    previous: Optional[StepDescriptor] = None
    for index, step in enumerate(steps):
        if not callable(step.action):
            raise StepTableError(f"Step {index} ({step.completion_event}) has no callable action")
        if step.completion_event in seen:
            raise StepTableError(f"Completion event {step.completion_event} declared twice")
        seen.add(step.completion_event)

        if previous is None:
            if step.trigger_event is not None:
                raise StepTableError(f"First step {step.name} must not have a trigger event")
        elif step.trigger_event != previous.completion_event:
            raise StepTableError(
                f"Step {step.name} is triggered by {step.trigger_event}, "
                f"expected {previous.completion_event} from {previous.name}"
            )
        previous = step


def insert_step(steps: Sequence[StepDescriptor], after: Hashable, step: StepDescriptor) -> List[StepDescriptor]:
    """
    Splice `step` into the chain right after the step completing `after`.

    The inserted step is triggered by `after` and the step that used to follow
    `after` is re-triggered by the new step's completion event.
    """
    table = list(steps)
    index = next((i for i, s in enumerate(table) if s.completion_event == after), None)
    if index is None:
        raise UnknownEventError(after)

    inserted = replace(step, trigger_event=after)
    table.insert(index + 1, inserted)
    if index + 2 < len(table):
        table[index + 2] = replace(table[index + 2], trigger_event=inserted.completion_event)
    return table


class _PendingSlot:
    """
    One subscription round for an event. Its timer races the next emission
    and the first settle wins; every attached waiter gets the outcome.
    """

    __slots__ = ("event", "timer", "state", "waiters")

    def __init__(self, event: Hashable, timer: asyncio.TimerHandle):
        self.event = event
        self.timer = timer
        self.state = SlotState.PENDING
        self.waiters: List[asyncio.Future] = []

    def detach(self, future: asyncio.Future):
        if future in self.waiters:
            self.waiters.remove(future)

    def settle(self, state: SlotState, result: Any = None, exception: Optional[BaseException] = None) -> bool:
        if self.state is not SlotState.PENDING:
            return False
        self.timer.cancel()
        self.state = state
        for future in self.waiters:
            if future.done():
                continue
            if exception is not None:
                future.set_exception(exception)
            else:
                future.set_result(result)
        return True


class InitLifecycle:
    """
    Drives an ordered chain of asynchronous initialization steps.

    Every step after the first starts the moment its predecessor's completion
    event is emitted on the bus. Each launched step gets `timeout_ms` to emit
    its completion event; a step that fails or overruns halts the chain for
    good. Waiters subscribe to completion events with `promise()`, and each
    subscription carries its own `timeout_ms` budget.
    """

    def __init__(self, logger: logging.Logger, events: EventBus, steps: Sequence[StepDescriptor], timeout_ms: float):
        validate_steps(steps)
        if timeout_ms <= 0:
            raise ValueError(f"timeout_ms must be positive, got {timeout_ms}")

        self.logger = logger
        self.events = events
        self.steps: Tuple[StepDescriptor, ...] = tuple(steps)
        self.timeout_ms = timeout_ms

        self._steps_by_event: Dict[Hashable, StepDescriptor] = {s.completion_event: s for s in self.steps}
        self._next_step: Dict[Hashable, StepDescriptor] = {s.trigger_event: s for s in self.steps[1:]}
        self._status: Dict[Hashable, StepStatus] = {s.completion_event: StepStatus.PENDING for s in self.steps}
        self._errors: Dict[Hashable, BaseException] = {}

        self._bound: Dict[Hashable, Callable[[], Any]] = {}
        self._listeners: Dict[Hashable, Callable[[Any], None]] = {}
        self._pending: Dict[Hashable, _PendingSlot] = {}
        # One timer per launched step, independent of caller subscriptions
        self._watchdogs: Dict[Hashable, asyncio.TimerHandle] = {}
        self._tasks: Set[asyncio.Task] = set()

        self._completion: Optional[asyncio.Future] = None
        self._result: Any = None

        self.state: State = NotStartedState()
        self.state.execute(self)

    @property
    def first_step(self) -> StepDescriptor:
        return self.steps[0]

    @property
    def terminal_event(self) -> Hashable:
        return self.steps[-1].completion_event

    def step_status(self, event: Hashable) -> StepStatus:
        self._check_known(event)
        return self._status[event]

    ##############
    ### Wiring ###
    ##############

    def setup(self, owner: Any):
        """Bind every action to `owner` and listen on every event of the chain, once."""
        if not isinstance(self.state, NotStartedState) or self._listeners:
            raise DuplicateSetupError(f"Init lifecycle already wired ({self.state.name})")

        for step in self.steps:
            self._bound[step.completion_event] = functools.partial(step.action, owner, *step.args)

        for step in self.steps:
            listener = functools.partial(self._on_event, step.completion_event)
            self._listeners[step.completion_event] = listener
            self.events.on(step.completion_event, listener)
            self.logger.debug(f"Wired step {step.name}: {step.trigger_event} -> {step.completion_event}")

        self._set_state(WiredState(), owner=owner)

    ##################
    ### Public API ###
    ##################

    def promise(self, event: Hashable) -> asyncio.Future:
        """
        Future for the next emission of `event`.

        Callers subscribing while a round is pending join it: they share its
        timer and its outcome, but each gets its own future, so cancelling one
        leaves the others and the step's own timeout alone. Rejects with
        StepTimeoutError once the round's `timeout_ms` elapses first, or with
        the step's own error when the step completing `event` has failed.
        """
        self._check_known(event)
        loop = asyncio.get_running_loop()
        future = loop.create_future()
        if self._status[event] is StepStatus.FAILED:
            future.set_exception(self._errors[event])
            return future

        slot = self._pending.get(event)
        if slot is None:
            timer = loop.call_later(self.timeout_ms / 1000, self._expire, event)
            slot = self._pending[event] = _PendingSlot(event, timer)
        slot.waiters.append(future)
        future.add_done_callback(functools.partial(self._on_waiter_done, slot))
        return future

    def emit(self, event: Hashable, payload: Any = None) -> bool:
        self._check_known(event)
        return self.events.emit(event, payload)

    def completion(self) -> asyncio.Future:
        """Future settled when the terminal event fires or the lifecycle fails."""
        if self._completion is None:
            self._completion = asyncio.get_running_loop().create_future()
            if isinstance(self.state, CompletedState):
                self._completion.set_result(self._result)
            elif isinstance(self.state, FailedState):
                self._completion.set_exception(self.state.reason)
        return self._completion

    async def run(self) -> Any:
        """Kick off the first step and wait for the whole chain."""
        if isinstance(self.state, NotStartedState):
            raise LifecycleError("setup() must be called before run()")
        if not isinstance(self.state, WiredState):
            raise LifecycleError(f"Init lifecycle already started ({self.state.name})")

        completion = self.completion()
        self._launch(self.first_step)
        return await completion

    ################
    ### Internal ###
    ################

    def _check_known(self, event: Hashable):
        if event not in self._steps_by_event:
            raise UnknownEventError(event)

    def _set_state(self, state: State, **kwargs) -> bool:
        if not self.state.can_transition_to(state):
            self.logger.debug(f"Ignoring transition {self.state.name} -> {state.name}")
            return False
        self.state = state
        self.state.execute(self, **kwargs)
        return True

    def _on_event(self, event: Hashable, payload: Any):
        try:
            self._advance(event, payload)
        except Exception as e:
            self.logger.error(f"Failed to advance init lifecycle on {event}: {e}", exc_info=True)
            self._fail(e)
            self._settle(event, SlotState.SETTLED_ERROR, exception=e)
        else:
            self._settle(event, SlotState.SETTLED_OK, result=payload)

    def _settle(self, event: Hashable, state: SlotState, result: Any = None, exception: Optional[BaseException] = None):
        slot = self._pending.pop(event, None)
        if slot is not None:
            slot.settle(state, result=result, exception=exception)

    def _advance(self, event: Hashable, payload: Any):
        self._disarm(event)
        if isinstance(self.state, FailedState):
            self.logger.warning(f"Ignoring {event}: init lifecycle already failed")
            return

        if self._status[event] is not StepStatus.FAILED:
            self._status[event] = StepStatus.COMPLETED
        if isinstance(self.state, WiredState):
            # The first step ran outside run(); its completion proves it
            self._set_state(RunningState())

        if event == self.terminal_event:
            self._result = payload
            if self._set_state(CompletedState()) and self._completion is not None and not self._completion.done():
                self._completion.set_result(payload)
            return

        step = self._next_step[event]
        if self._status[step.completion_event] is not StepStatus.PENDING:
            self.logger.debug(f"Step {step.name} already {self._status[step.completion_event].value}, not relaunching")
            return
        self._launch(step)

    def _launch(self, step: StepDescriptor):
        if isinstance(self.state, WiredState):
            self._set_state(RunningState())

        loop = asyncio.get_running_loop()
        self._status[step.completion_event] = StepStatus.RUNNING
        self._watchdogs[step.completion_event] = loop.call_later(self.timeout_ms / 1000, self._overrun, step.completion_event)

        task = loop.create_task(self._run_step(step), name=f"InitStep-{step.name}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run_step(self, step: StepDescriptor):
        self.logger.info(f"Running init step {step.name}")
        try:
            result = self._bound[step.completion_event]()
            if inspect.isawaitable(result):
                await result
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.logger.error(f"Init step {step.name} failed: {e!r}")
            self._fail_step(step.completion_event, e)
        else:
            self.logger.debug(f"Init step {step.name} finished")

    def _fail_step(self, event: Hashable, error: Exception):
        self._disarm(event)
        if self._status[event] is not StepStatus.COMPLETED:
            self._status[event] = StepStatus.FAILED
            self._errors[event] = error

        self._settle(event, SlotState.SETTLED_ERROR, exception=error)

        wrapped = StepActionError(event, error)
        wrapped.__cause__ = error
        self._fail(wrapped)

    def _expire(self, event: Hashable):
        # A subscription ran out; the step itself is judged by its watchdog
        slot = self._pending.pop(event, None)
        if slot is None:
            return
        error = StepTimeoutError(event, self.timeout_ms)
        if slot.settle(SlotState.SETTLED_TIMEOUT, exception=error):
            self.logger.warning(f"{error}")

    def _overrun(self, event: Hashable):
        self._watchdogs.pop(event, None)
        if self._status[event] is not StepStatus.RUNNING:
            return

        error = StepTimeoutError(event, self.timeout_ms)
        self.logger.warning(f"Init step {self._steps_by_event[event].name}: {error}")
        self._status[event] = StepStatus.FAILED
        self._errors[event] = error
        self._settle(event, SlotState.SETTLED_TIMEOUT, exception=error)
        self._fail(error)

    def _disarm(self, event: Hashable):
        timer = self._watchdogs.pop(event, None)
        if timer is not None:
            timer.cancel()

    def _fail(self, error: BaseException):
        if not self._set_state(FailedState(error)):
            return
        for event in list(self._watchdogs):
            self._disarm(event)
        if self._completion is not None and not self._completion.done():
            self._completion.set_exception(error)

    def _on_waiter_done(self, slot: _PendingSlot, future: asyncio.Future):
        if not future.cancelled():
            return
        slot.detach(future)
        # The last waiter walked away; nothing needs the round's timer
        if not slot.waiters and slot.state is SlotState.PENDING:
            slot.timer.cancel()
            if self._pending.get(slot.event) is slot:
                del self._pending[slot.event]
