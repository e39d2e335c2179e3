import datetime
import logging
import sys
import threading
import time

from suimev import runtime


def test_redact_long_args():
    long_arg = "k" * 33
    assert runtime.redact_args(["prog", long_arg, "short"]) == "prog [REDACTED] short"


def test_redact_keeps_args_at_limit():
    arg = "k" * 32
    assert runtime.redact_args([arg]) == arg


def test_format_panic_message_with_location():
    text = runtime.format_panic_message("main", "boom", "src/main.py", 3)
    assert text == "thread 'main' panicked at 'boom': src/main.py:3"


def test_format_panic_message_without_location():
    assert runtime.format_panic_message("worker", "oops") == "thread 'worker' panicked at 'oops'"


def test_current_time_ms_is_now():
    before = int(time.time() * 1000)
    value = runtime.current_time_ms()
    after = int(time.time() * 1000)
    assert before - 1 <= value <= after + 1


def test_heartbeat_logs_start(caplog):
    caplog.set_level(logging.INFO)
    worker = runtime.start_heartbeat("svc", datetime.timedelta(seconds=5))
    worker.join(timeout=5)
    assert not worker.is_alive()
    assert "Heartbeat worker started for svc, interval: 5" in caplog.text


def test_panic_hook_reports_main_thread(monkeypatch, caplog):
    monkeypatch.setattr(sys, "excepthook", sys.excepthook)
    monkeypatch.setattr(threading, "excepthook", threading.excepthook)
    caplog.set_level(logging.ERROR, logger="panic_hook")
    runtime.set_panic_hook()
    try:
        raise ValueError("boom")
    except ValueError:
        sys.excepthook(*sys.exc_info())
    assert "thread 'MainThread' panicked at 'boom'" in caplog.text
    assert "test_runtime.py" in caplog.text


def test_panic_hook_reports_other_thread(monkeypatch, caplog):
    monkeypatch.setattr(sys, "excepthook", sys.excepthook)
    monkeypatch.setattr(threading, "excepthook", threading.excepthook)
    caplog.set_level(logging.ERROR, logger="panic_hook")
    runtime.set_panic_hook()

    def fail():
        raise RuntimeError("thread failure")

    worker = threading.Thread(target=fail, name="crasher")
    worker.start()
    worker.join()
    assert "thread 'crasher' panicked at 'thread failure'" in caplog.text