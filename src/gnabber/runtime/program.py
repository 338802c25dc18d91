"""The MVU program loop.

Hides the dispatch mechanics: one queue, one consumer, one ``update``
call at a time. Effects run as separate tasks and re-enter the queue
as messages, so the loop itself never waits on the network.
"""

import asyncio
import logging
from collections.abc import Callable, Coroutine
from typing import Any

from ..chat.effects import Effect
from ..chat.messages import Msg
from ..chat.state import ClientState

logger = logging.getLogger(__name__)

UpdateFn = Callable[[ClientState, Msg], tuple[ClientState, list[Effect]]]
EffectRunner = Callable[[Effect, Callable[[Msg], None]], Coroutine[Any, Any, None]]
StateListener = Callable[[ClientState], None]


class Program:
    """Serializes messages through ``update`` and runs the resulting effects.

    Usage:
        state, effects = init()
        program = Program(state, update, executor.execute, initial_effects=effects)
        program.subscribe(render)
        program.dispatch(UsernameChanged("alice"))
        await program.run()
    """

    def __init__(
        self,
        state: ClientState,
        update: UpdateFn,
        run_effect: EffectRunner,
        initial_effects: list[Effect] | None = None,
        trace: bool = False,
    ) -> None:
        """
        Initialize the program.

        Args:
            state: Initial state
            update: Transition function
            run_effect: Coroutine function that performs one effect
            initial_effects: Effects to run when the loop starts
            trace: Log every message and resulting state at DEBUG
        """
        self._state = state
        self._update = update
        self._run_effect = run_effect
        self._initial_effects = list(initial_effects or [])
        self._trace = trace
        self._queue: asyncio.Queue[Msg | None] = asyncio.Queue()
        self._listeners: list[StateListener] = []
        self._tasks: set[asyncio.Task] = set()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._running = False

    @property
    def state(self) -> ClientState:
        return self._state

    @property
    def running(self) -> bool:
        return self._running

    def subscribe(self, listener: StateListener) -> None:
        """Call ``listener`` with the current state now and after every update."""
        self._listeners.append(listener)
        listener(self._state)

    def dispatch(self, msg: Msg) -> None:
        """Queue a message. Must be called from the program's event loop."""
        self._queue.put_nowait(msg)

    def dispatch_threadsafe(self, msg: Msg) -> None:
        """Queue a message from another thread."""
        if self._loop is None:
            raise RuntimeError("Program is not running")
        self._loop.call_soon_threadsafe(self._queue.put_nowait, msg)

    def stop(self) -> None:
        """Stop the loop after the message currently being handled."""
        self._queue.put_nowait(None)

    async def run(self) -> None:
        """Process messages until ``stop`` is called."""
        self._loop = asyncio.get_running_loop()
        self._running = True
        try:
            for effect in self._initial_effects:
                self._spawn(effect)
            self._initial_effects = []

            while True:
                msg = await self._queue.get()
                if msg is None:
                    break
                self._step(msg)
        finally:
            self._running = False
            for task in list(self._tasks):
                task.cancel()
            if self._tasks:
                await asyncio.gather(*self._tasks, return_exceptions=True)
            self._tasks.clear()

    def _step(self, msg: Msg) -> None:
        state, effects = self._update(self._state, msg)
        self._state = state
        if self._trace:
            logger.debug("Message: %r", msg)
            logger.debug("Updated state: %r", state)
        for listener in list(self._listeners):
            listener(state)
        for effect in effects:
            self._spawn(effect)

    def _spawn(self, effect: Effect) -> None:
        if self._trace:
            logger.debug("Running effect: %r", effect)
        task = asyncio.create_task(self._run_effect(effect, self.dispatch))
        self._tasks.add(task)
        task.add_done_callback(self._effect_done)

    def _effect_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error("Effect failed", exc_info=error)
