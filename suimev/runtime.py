"""Process-wide helpers: crash reporting, clock and heartbeat."""

from __future__ import annotations

import datetime
import json
import logging
import re
import sys
import threading
import time
import traceback
import urllib.request
from typing import Iterable

TELEGRAM_API = "https://api.telegram.org"
TELEGRAM_BOT_TOKEN = ""
CHAT_ERROR_REPORT = ""
CHAT_ERROR_REPORT_THREAD = ""

_REDACT_OVER = 32
_MARKDOWN_SPECIAL = re.compile(r"([_*\[\]()~`>#+\-=|{}.!\\])")

log = logging.getLogger(__name__)


def redact_args(args: Iterable[str]) -> str:
    """Join command-line arguments, hiding long ones such as private keys."""
    return " ".join("[REDACTED]" if len(arg.encode("utf-8")) > _REDACT_OVER else arg for arg in args)


def format_panic_message(thread_name: str, message: str, file: str | None = None, line: int | None = None) -> str:
    if file is None:
        return f"thread '{thread_name}' panicked at '{message}'"
    return f"thread '{thread_name}' panicked at '{message}': {file}:{line}"


def _escape_markdown(text: str) -> str:
    return _MARKDOWN_SPECIAL.sub(r"\\\1", text)


def _send_panic_to_telegram(cmdline: str, message: str) -> None:
    if not TELEGRAM_BOT_TOKEN:
        return
    text = _escape_markdown(
        f"cmd: {json.dumps(cmdline, ensure_ascii=False)}\nerror: {json.dumps(message, ensure_ascii=False)}"
    )
    payload = {
        "chat_id": CHAT_ERROR_REPORT,
        "text": text,
        "parse_mode": "MarkdownV2",
        "disable_web_page_preview": True,
        "disable_notification": True,
    }
    if CHAT_ERROR_REPORT_THREAD:
        payload["message_thread_id"] = CHAT_ERROR_REPORT_THREAD
    request = urllib.request.Request(
        f"{TELEGRAM_API}/bot{TELEGRAM_BOT_TOKEN}/sendMessage",
        data=json.dumps(payload).encode("utf-8"),
        headers={"Content-Type": "application/json"},
        method="POST",
    )
    try:
        with urllib.request.urlopen(request, timeout=10):
            pass
    except OSError as exc:
        log.warning("failed to send crash report: %s", exc)


def _report(thread_name: str, exc_type, exc_value, exc_traceback) -> None:
    cmdline = redact_args(sys.argv)
    message = str(exc_value) if exc_value is not None and str(exc_value) else exc_type.__name__
    frames = traceback.extract_tb(exc_traceback) if exc_traceback is not None else []
    if frames:
        last = frames[-1]
        err_msg = format_panic_message(thread_name, message, last.filename, last.lineno)
    else:
        err_msg = format_panic_message(thread_name, message)
    _send_panic_to_telegram(cmdline, err_msg)
    logging.getLogger("panic_hook").error(err_msg)


def set_panic_hook() -> None:
    """Report uncaught exceptions, in any thread, to the log and the chat."""

    def excepthook(exc_type, exc_value, exc_traceback):
        _report(threading.current_thread().name, exc_type, exc_value, exc_traceback)

    def thread_excepthook(args):
        name = args.thread.name if args.thread is not None else "<unnamed>"
        _report(name, args.exc_type, args.exc_value, args.exc_traceback)

    sys.excepthook = excepthook
    threading.excepthook = thread_excepthook


def current_time_ms() -> int:
    return time.time_ns() // 1_000_000


def _heartbeat_worker(service_id: str, interval_secs: int) -> None:
    log.info("Heartbeat worker started for %s, interval: %s", service_id, interval_secs)


def start_heartbeat(service_id: str, interval: float | datetime.timedelta) -> threading.Thread:
    """Start the heartbeat worker for a service in the background."""
    seconds = interval.total_seconds() if isinstance(interval, datetime.timedelta) else float(interval)
    worker = threading.Thread(
        target=_heartbeat_worker,
        args=(str(service_id), int(seconds)),
        name=f"heartbeat-{service_id}",
        daemon=True,
    )
    worker.start()
    return worker