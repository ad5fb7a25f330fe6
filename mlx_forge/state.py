"""
Observable session state shared between the core and a front-end
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Tuple

from .interpreter import Interpreter, SystemDefault
from .validator import EnvironmentCheck

logger = logging.getLogger(__name__)

LOG_PLACEHOLDER = "Process output will appear here..."

Dispatcher = Callable[[Callable[[], None]], None]
Listener = Callable[[str, Any], None]


def immediate(update: Callable[[], None]):
    update()


def loop_dispatcher(loop) -> Dispatcher:
    """Marshal state updates onto ``loop`` from any thread"""

    def dispatch(update: Callable[[], None]):
        loop.call_soon_threadsafe(update)

    return dispatch


@dataclass(frozen=True)
class LogEntry:
    text: str
    error: bool = False


class OperationLog:
    """Transcript of the active operation, append-only until reset"""

    def __init__(self, initial: str = LOG_PLACEHOLDER):
        self._entries: List[LogEntry] = [LogEntry(initial)]

    def reset(self, initial: str = LOG_PLACEHOLDER):
        self._entries = [LogEntry(initial)]

    def append(self, text: str, error: bool = False):
        self._entries.append(LogEntry(text, error))

    @property
    def entries(self) -> Tuple[LogEntry, ...]:
        return tuple(self._entries)

    @property
    def text(self) -> str:
        return "".join(entry.text for entry in self._entries)

    def __str__(self) -> str:
        return self.text


class SessionState:
    """
    Flags, environment verdict and transcript of one front-end session.

    Every mutation is handed to the dispatcher so it runs in the context that
    owns presentation; listeners are notified from that same context with an
    ``(event, payload)`` pair.
    """

    def __init__(self, interpreter: Optional[Interpreter] = None, dispatcher: Optional[Dispatcher] = None):
        self.log = OperationLog()
        self.is_running = False
        self.is_setting_up = False
        self.environment: Optional[EnvironmentCheck] = None
        self.interpreter: Interpreter = interpreter or SystemDefault()
        self._dispatch = dispatcher or immediate
        self._listeners: List[Listener] = []

    @property
    def busy(self) -> bool:
        return self.is_running or self.is_setting_up

    def subscribe(self, listener: Listener):
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, event: str, payload: Any):
        for listener in list(self._listeners):
            listener(event, payload)

    def _update(self, apply: Callable[[], None], event: str, payload: Any):
        def run():
            apply()
            self._notify(event, payload)

        self._dispatch(run)

    def reset_log(self, initial: str = LOG_PLACEHOLDER):
        self._update(lambda: self.log.reset(initial), "log_reset", initial)

    def append_log(self, text: str, error: bool = False):
        self._update(lambda: self.log.append(text, error), "log_append", LogEntry(text, error))

    def set_running(self, value: bool):
        self._update(lambda: setattr(self, "is_running", value), "running", value)

    def set_setting_up(self, value: bool):
        self._update(lambda: setattr(self, "is_setting_up", value), "setting_up", value)

    def set_environment(self, check: EnvironmentCheck):
        self._update(lambda: setattr(self, "environment", check), "environment", check)

    def set_interpreter(self, interpreter: Interpreter):
        logger.info(f"Session interpreter set to {interpreter}")
        self._update(lambda: setattr(self, "interpreter", interpreter), "interpreter", interpreter)
