"""ストアのコルーチンをGUIスレッド外で実行する仕組みのテスト。"""

import asyncio
import threading

import pytest
from PyQt6 import sip
from PyQt6.QtCore import QObject

from conftest import wait_until
from utils.async_runner import AsyncRunner, run_blocking


async def _answer(value):
    return value


async def _boom():
    raise RuntimeError("boom")


async def _slow(value, seconds):
    await asyncio.sleep(seconds)
    return value


def test_run_blocking_calls_back_immediately():
    results = []
    run_blocking(_answer(42), results.append)
    assert results == [42]


def test_run_blocking_reports_errors_to_handler():
    results = []
    errors = []
    run_blocking(_boom(), results.append, errors.append)
    assert results == []
    assert len(errors) == 1
    assert "boom" in errors[0]


def test_run_blocking_raises_without_handler():
    with pytest.raises(RuntimeError):
        run_blocking(_boom(), lambda _: None)


def test_result_delivered_on_gui_thread(qapp):
    runner = AsyncRunner()
    results = []
    threads = []

    def callback(value):
        results.append(value)
        threads.append(threading.current_thread())

    runner.submit(_answer("done"), callback)
    assert wait_until(qapp, lambda: results == ["done"])
    assert threads[0] is threading.main_thread()
    assert wait_until(qapp, lambda: runner.pending_count() == 0)


def test_errors_reported(qapp):
    runner = AsyncRunner()
    errors = []
    results = []
    runner.submit(_boom(), results.append, errors.append)
    assert wait_until(qapp, lambda: len(errors) == 1)
    assert "boom" in errors[0]
    assert results == []


def test_call_forwards_error_handler(qapp):
    runner = AsyncRunner()
    errors = []
    runner(_boom(), lambda _: None, errors.append)
    assert wait_until(qapp, lambda: len(errors) == 1)


def test_wait_all_waits_without_limit(qapp):
    runner = AsyncRunner()
    thread = runner.submit(_slow("late", 0.3), lambda _: None)
    assert runner.wait_all()
    assert thread.isFinished()
    assert wait_until(qapp, lambda: runner.pending_count() == 0)


def test_running_thread_outlives_its_owner(qapp):
    owner = QObject()
    runner = AsyncRunner(owner)
    results = []
    thread = runner.submit(_slow("kept", 0.3), results.append)

    sip.delete(owner)
    assert sip.isdeleted(runner)
    assert not sip.isdeleted(thread)
    assert thread.isRunning()

    thread.wait()
    assert wait_until(qapp, lambda: results == ["kept"])
