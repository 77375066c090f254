"""Configuration for the Telegram channel: decoding and defaults."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Mapping, Tuple, Union

__all__ = [
    "DEFAULT_BOT_TOKEN_ENV",
    "DEFAULT_LONG_POLL_SECONDS",
    "DEFAULT_API_BASE_URL",
    "MAX_LONG_POLL_SECONDS",
    "TELEGRAM_MESSAGE_LIMIT",
    "TelegramConfig",
    "ConfigError",
    "decode_config",
]

DEFAULT_BOT_TOKEN_ENV = "PEGGY_TELEGRAM_TOKEN"
DEFAULT_LONG_POLL_SECONDS = 30
DEFAULT_API_BASE_URL = "https://api.telegram.org"
MAX_LONG_POLL_SECONDS = 60
TELEGRAM_MESSAGE_LIMIT = 4096


class ConfigError(ValueError):
    """Raised when the channel configuration cannot be decoded."""


@dataclass(frozen=True)
class TelegramConfig:
    """The ``channels.telegram`` settings block.

    ``allow_chats`` restricts inbound messages to those chat ids; an empty
    tuple refuses every message.
    """

    bot_token_env: str = ""
    allow_chats: Tuple[int, ...] = ()
    long_poll_timeout_seconds: int = 0
    api_base_url: str = ""


RawConfig = Union[str, bytes, Mapping[str, Any], None]


def _parse(raw: RawConfig) -> Mapping[str, Any]:
    if raw is None:
        return {}
    if isinstance(raw, (str, bytes)):
        text = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw
        if not text.strip():
            return {}
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"telegram: decode config: {exc}") from exc
        if raw is None:
            return {}
    if not isinstance(raw, Mapping):
        raise ConfigError(f"telegram: decode config: expected an object, got {type(raw).__name__}")
    return raw


def _str_field(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ConfigError(f"telegram: decode config: {key} must be a string")
    return value


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def decode_config(raw: RawConfig = None) -> TelegramConfig:
    """Decode the ``channels.telegram`` subtree and fill in defaults.

    ``raw`` may be JSON text, bytes, an already-decoded mapping, or ``None``;
    empty input and JSON ``null`` yield the default configuration. The
    long-poll timeout is clamped to :data:`MAX_LONG_POLL_SECONDS`.
    """
    data = _parse(raw)

    chats = data.get("allow_chats")
    if chats is None:
        allow: Tuple[int, ...] = ()
    elif isinstance(chats, list) and all(_is_int(c) for c in chats):
        allow = tuple(chats)
    else:
        raise ConfigError("telegram: decode config: allow_chats must be a list of integers")

    timeout = data.get("long_poll_timeout_seconds")
    if timeout is None:
        timeout = 0
    elif not _is_int(timeout):
        raise ConfigError("telegram: decode config: long_poll_timeout_seconds must be an integer")
    if timeout <= 0:
        timeout = DEFAULT_LONG_POLL_SECONDS
    timeout = min(timeout, MAX_LONG_POLL_SECONDS)

    return TelegramConfig(
        bot_token_env=_str_field(data, "bot_token_env") or DEFAULT_BOT_TOKEN_ENV,
        allow_chats=allow,
        long_poll_timeout_seconds=timeout,
        api_base_url=_str_field(data, "api_base_url") or DEFAULT_API_BASE_URL,
    )