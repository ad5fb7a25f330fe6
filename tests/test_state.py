import asyncio
import threading

import pytest

from mlx_forge.interpreter import Explicit, SystemDefault
from mlx_forge.state import LOG_PLACEHOLDER, LogEntry, OperationLog, SessionState, loop_dispatcher
from mlx_forge.validator import EnvironmentCheck, EnvironmentStatus


def test_operation_log_reset_and_append():
    log = OperationLog()
    assert log.text == LOG_PLACEHOLDER
    log.reset("Starting conversion...\n")
    log.append("line 1\n")
    log.append("warning\n", error=True)
    assert log.text == "Starting conversion...\nline 1\nwarning\n"
    assert log.entries[-1] == LogEntry("warning\n", True)
    log.reset()
    assert log.entries == (LogEntry(LOG_PLACEHOLDER),)


def test_session_state_notifies_listeners():
    state = SessionState()
    events = []
    state.subscribe(lambda event, payload: events.append((event, payload)))
    state.set_running(True)
    state.reset_log("start\n")
    state.append_log("oops", error=True)
    state.set_interpreter(Explicit("/usr/bin/python3"))
    assert events == [
        ("running", True),
        ("log_reset", "start\n"),
        ("log_append", LogEntry("oops", True)),
        ("interpreter", Explicit("/usr/bin/python3")),
    ]
    assert state.busy


def test_unsubscribe():
    state = SessionState()
    events = []
    listener = lambda event, payload: events.append(event)  # noqa: E731
    state.subscribe(listener)
    state.unsubscribe(listener)
    state.set_setting_up(True)
    assert events == []
    assert state.is_setting_up and state.busy


def test_custom_dispatcher_defers_mutation():
    pending = []
    state = SessionState(dispatcher=pending.append)
    state.set_running(True)
    assert state.is_running is False
    pending.pop()()
    assert state.is_running is True


def test_default_interpreter():
    assert SessionState().interpreter == SystemDefault()


def test_environment_starts_unset_and_holds_latest_check():
    state = SessionState()
    assert state.environment is None
    check = EnvironmentCheck(EnvironmentStatus.VALID, "ok", "Python Version: 3.11.9")
    state.set_environment(check)
    assert state.environment is check
    assert state.environment.is_valid


@pytest.mark.asyncio
async def test_loop_dispatcher_marshals_from_worker_thread():
    loop = asyncio.get_running_loop()
    state = SessionState(dispatcher=loop_dispatcher(loop))
    seen_threads = []
    state.subscribe(lambda event, payload: seen_threads.append(threading.get_ident()))

    worker = threading.Thread(target=state.append_log, args=("from worker\n",))
    worker.start()
    worker.join()
    await asyncio.sleep(0)

    assert state.log.text.endswith("from worker\n")
    assert seen_threads == [threading.get_ident()]
