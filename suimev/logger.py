"""Logging set-up: console and hourly rotating file output with per-target level directives."""

from __future__ import annotations

import logging
import logging.handlers
import os
from pathlib import Path
from typing import Iterable, Sequence

TRACE = 5
OFF = 100
logging.addLevelName(TRACE, "TRACE")

LOG_DIR = Path("logs")
ENV_VAR = "SUIMEV_LOG"

_LEVELS = {
    "off": OFF,
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
    "trace": TRACE,
}
_LEVEL_NAMES = {
    OFF: "off",
    logging.ERROR: "error",
    logging.WARNING: "warn",
    logging.INFO: "info",
    logging.DEBUG: "debug",
    TRACE: "trace",
}

_DEFAULT_WHITELIST = ("burberry", "reconstruct", "mev_core::flashloan", "panic_hook")


def _parse_level(level: str | int | None, default: int = logging.INFO) -> int:
    if level is None:
        return default
    if isinstance(level, int):
        return level
    try:
        return _LEVELS[level.strip().lower()]
    except KeyError:
        raise ValueError(f"invalid level: {level!r}") from None


def _level_name(level: int) -> str:
    return _LEVEL_NAMES.get(level, str(level))


def _normalize_target(target: str) -> str:
    return target.strip().replace("::", ".")


class DirectiveFilter(logging.Filter):
    """Filters records by the most specific matching `target=level` directive."""

    def __init__(self, default: str | int | None = None, directives: Iterable[str] = ()) -> None:
        super().__init__()
        self.default = _parse_level(default)
        self._targets: list[tuple[str, str, int]] = []
        for directive in directives:
            self.add_directive(directive)

    def add_directive(self, directive: str) -> "DirectiveFilter":
        directive = directive.strip()
        if not directive:
            return self
        if "=" in directive:
            target, level = directive.split("=", 1)
            parsed = _parse_level(level)
            normalized = _normalize_target(target)
            self._targets = [t for t in self._targets if t[1] != normalized]
            self._targets.append((target.strip(), normalized, parsed))
        else:
            self.default = _parse_level(directive)
        return self

    def level_for(self, name: str) -> int:
        best: tuple[int, int] | None = None
        for _, target, level in self._targets:
            if name == target or name.startswith(target + "."):
                if best is None or len(target) > best[0]:
                    best = (len(target), level)
        return best[1] if best else self.default

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= self.level_for(record.name)

    def __str__(self) -> str:
        return ",".join(f"{raw}={_level_name(level)}" for raw, _, level in self._targets)


def _formatter(with_target: bool) -> logging.Formatter:
    if with_target:
        return logging.Formatter("%(asctime)s %(levelname)5s %(name)s: %(message)s")
    return logging.Formatter("%(asctime)s %(levelname)5s %(message)s")


def _file_handler(file_name: str, log_filter: logging.Filter) -> logging.Handler:
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.TimedRotatingFileHandler(LOG_DIR / file_name, when="H", encoding="utf-8")
    handler.setFormatter(_formatter(True))
    handler.addFilter(log_filter)
    return handler


def _console_handler(with_target: bool, log_filter: logging.Filter) -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setFormatter(_formatter(with_target))
    handler.addFilter(log_filter)
    return handler


def _install(handlers: list[logging.Handler]) -> list[logging.Handler]:
    root = logging.getLogger()
    root.setLevel(TRACE)
    for handler in handlers:
        root.addHandler(handler)
    return handlers


def init(name: str) -> list[logging.Handler]:
    """Log at info to the console and to an hourly rotating ./logs/<name>.log."""
    console = _console_handler(False, DirectiveFilter("info"))
    file_handler = _file_handler(f"{name}.log", DirectiveFilter("info"))
    return _install([console, file_handler])


def init_with_chain(chain: object, name: str) -> list[logging.Handler]:
    return init(f"{name}-{chain}")


def new_whitelist_mode_env_filter(allowed_modules: Sequence[str], level: str | int) -> DirectiveFilter:
    """A filter that is off by default and lets through only the listed modules."""
    level_text = _level_name(_parse_level(level))
    directives = [module if "=" in module else f"{module}={level_text}" for module in allowed_modules]
    return DirectiveFilter(OFF, directives)


def init_with_whitelisted_modules(chain: object, name: str, modules: Sequence[str]) -> list[logging.Handler]:
    allowed = [*_DEFAULT_WHITELIST, *modules]
    file_handler = _file_handler(f"{name}-{chain}.log", new_whitelist_mode_env_filter(allowed, TRACE))
    console = _console_handler(True, new_whitelist_mode_env_filter(allowed, logging.INFO))
    return _install([file_handler, console])


def init_console_logger(level: str | int | None = None) -> list[logging.Handler]:
    return init_console_logger_with_directives(level, [])


def init_console_logger_with_directives(
    level: str | int | None, directives: Sequence[str]
) -> list[logging.Handler]:
    """Console logging; directives come from the environment, then from the arguments."""
    env_filter = DirectiveFilter(_parse_level(level))
    for directive in os.environ.get(ENV_VAR, "").split(","):
        env_filter.add_directive(directive)
    for directive in directives:
        env_filter.add_directive(directive)
    return _install([_console_handler(True, env_filter)])