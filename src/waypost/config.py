"""Server configuration.

Values come from code (``ServerConfig(...)``), the environment
(``ServerConfig.from_env()``, ``WAYPOST_*`` variables) or the command line,
which builds on the environment.
"""

from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass, field
from typing import Mapping

from .middleware.body_parser import BodyParserOptions
from .routing.dispatcher import MountPrecedence

ENV_PREFIX = "WAYPOST_"

_TRUE = ("1", "true", "yes", "on")
_FALSE = ("0", "false", "no", "off")


def _default_temp_dir() -> str:
    return os.path.join(tempfile.gettempdir(), "waypost")


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


@dataclass
class ServerConfig:
    """Everything needed to build and run a ``Server``."""

    host: str = "127.0.0.1"
    port: int = 8080
    max_header_bytes: int = 64 * 1024
    # None keeps the whole body in memory regardless of size
    max_body_bytes: int | None = None
    temp_dir: str = field(default_factory=_default_temp_dir)
    log_level: str = "INFO"
    use_body_parser: bool = True
    body_parser: BodyParserOptions = field(default_factory=BodyParserOptions)
    precedence: MountPrecedence = MountPrecedence.GENERAL_FIRST

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        if not 0 <= self.port <= 65535:
            raise ValueError(f"port must be between 0 and 65535, got {self.port}")
        if self.max_header_bytes <= 0:
            raise ValueError("max_header_bytes must be positive")
        if self.max_body_bytes is not None and self.max_body_bytes <= 0:
            raise ValueError("max_body_bytes must be positive")
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"unknown log level {self.log_level!r}")

    @property
    def log_level_number(self) -> int:
        return logging.getLevelName(self.log_level.upper())

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ServerConfig":
        env = os.environ if environ is None else environ

        def get(name: str) -> str | None:
            return env.get(ENV_PREFIX + name)

        kwargs: dict = {}
        if (host := get("HOST")) is not None:
            kwargs["host"] = host
        for name in ("PORT", "MAX_HEADER_BYTES", "MAX_BODY_BYTES"):
            if (raw := get(name)) is not None:
                try:
                    kwargs[name.lower()] = int(raw)
                except ValueError as e:
                    raise ValueError(f"{ENV_PREFIX}{name} must be an integer, got {raw!r}") from e
        if (temp_dir := get("TEMP_DIR")) is not None:
            kwargs["temp_dir"] = temp_dir
        if (level := get("LOG_LEVEL")) is not None:
            kwargs["log_level"] = level
        if (raw := get("BODY_PARSER")) is not None:
            kwargs["use_body_parser"] = _parse_bool(ENV_PREFIX + "BODY_PARSER", raw)

        flags = {}
        for name in ("PARSE_JSON", "PARSE_URLENCODED", "PARSE_FORM_DATA"):
            if (raw := get(name)) is not None:
                flags[name.lower()] = _parse_bool(ENV_PREFIX + name, raw)
        if flags:
            kwargs["body_parser"] = BodyParserOptions(**flags)

        if (raw := get("PRECEDENCE")) is not None:
            try:
                kwargs["precedence"] = MountPrecedence[raw.strip().upper()]
            except KeyError as e:
                choices = ", ".join(p.name.lower() for p in MountPrecedence)
                raise ValueError(f"{ENV_PREFIX}PRECEDENCE must be one of {choices}, got {raw!r}") from e

        return cls(**kwargs)
