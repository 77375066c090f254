"""A small Telegram Bot API client: long-poll updates and send text messages."""

from __future__ import annotations

import json
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional

from .telegram_config import DEFAULT_API_BASE_URL, TELEGRAM_MESSAGE_LIMIT

__all__ = [
    "User",
    "Chat",
    "Message",
    "Update",
    "TelegramError",
    "TelegramAPI",
    "redact_error",
]

_MAX_BODY_BYTES = 4 * 1024 * 1024
_TRUNCATION_SUFFIX = "\n… [truncated]"
_LONG_POLL_GRACE_SECONDS = 10
_SEND_TIMEOUT_SECONDS = 30


class TelegramError(Exception):
    """Raised when a Bot API call fails: transport, decoding or a not-ok reply."""


def _int_field(data: Mapping[str, Any], key: str) -> int:
    value = data.get(key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise TelegramError(f"telegram: decode updates: {key} must be an integer")
    return value


def _str_field(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise TelegramError(f"telegram: decode updates: {key} must be a string")
    return value


def _obj_field(data: Mapping[str, Any], key: str) -> Optional[Mapping[str, Any]]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, Mapping):
        raise TelegramError(f"telegram: decode updates: {key} must be an object")
    return value


@dataclass(frozen=True)
class User:
    """The sender of a message."""

    id: int
    username: str = ""
    first_name: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "User":
        return cls(
            id=_int_field(data, "id"),
            username=_str_field(data, "username"),
            first_name=_str_field(data, "first_name"),
        )


@dataclass(frozen=True)
class Chat:
    """The conversation a message belongs to."""

    id: int
    type: str = ""
    title: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Chat":
        return cls(
            id=_int_field(data, "id"),
            type=_str_field(data, "type"),
            title=_str_field(data, "title"),
        )


@dataclass(frozen=True)
class Message:
    """A text message; other message kinds decode with an empty ``text``."""

    message_id: int
    chat: Chat
    date: int = 0
    text: str = ""
    from_user: Optional[User] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Message":
        sender = _obj_field(data, "from")
        return cls(
            message_id=_int_field(data, "message_id"),
            chat=Chat.from_dict(_obj_field(data, "chat") or {}),
            date=_int_field(data, "date"),
            text=_str_field(data, "text"),
            from_user=User.from_dict(sender) if sender is not None else None,
        )


@dataclass(frozen=True)
class Update:
    """One entry returned by ``getUpdates``."""

    update_id: int
    message: Optional[Message] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Update":
        message = _obj_field(data, "message")
        return cls(
            update_id=_int_field(data, "update_id"),
            message=Message.from_dict(message) if message is not None else None,
        )


def redact_error(message: object, token: str) -> str:
    """Return ``message`` as text with every occurrence of ``token`` replaced."""
    text = str(message)
    if not token:
        return text
    return text.replace(token, "<redacted>")


def _parse_updates(result: Any) -> List[Update]:
    if result is None:
        return []
    if not isinstance(result, list):
        raise TelegramError("telegram: decode updates: expected a list")
    updates = []
    for item in result:
        if not isinstance(item, Mapping):
            raise TelegramError("telegram: decode updates: expected objects")
        updates.append(Update.from_dict(item))
    return updates


class TelegramAPI:
    """Minimal Bot API client. ``opener`` defaults to a standard urllib opener."""

    def __init__(
        self,
        base_url: str = "",
        token: str = "",
        opener: Optional[urllib.request.OpenerDirector] = None,
    ) -> None:
        self.base_url = (base_url or DEFAULT_API_BASE_URL).rstrip("/")
        self.token = token
        self.opener = opener or urllib.request.build_opener()

    def get_updates(self, offset: int, timeout_seconds: int) -> List[Update]:
        """Long-poll for updates whose id is at least ``offset``."""
        result = self._call(
            "getUpdates",
            {"offset": offset, "timeout": timeout_seconds},
            timeout=max(timeout_seconds, 0) + _LONG_POLL_GRACE_SECONDS,
        )
        return _parse_updates(result)

    def send_message(self, chat_id: int, text: str) -> None:
        """Send ``text`` to ``chat_id``, truncated to Telegram's message size cap."""
        data = text.encode("utf-8")
        if len(data) > TELEGRAM_MESSAGE_LIMIT:
            suffix = _TRUNCATION_SUFFIX.encode("utf-8")
            head = data[: TELEGRAM_MESSAGE_LIMIT - len(suffix)]
            text = head.decode("utf-8", errors="ignore") + _TRUNCATION_SUFFIX
        self._call(
            "sendMessage",
            {"chat_id": chat_id, "text": text},
            timeout=_SEND_TIMEOUT_SECONDS,
        )

    def _call(self, method: str, payload: Mapping[str, Any], timeout: float) -> Any:
        if not self.token:
            raise TelegramError("telegram: bot token is required")
        url = f"{self.base_url}/bot{self.token}/{method}"
        body = json.dumps(payload).encode("utf-8")
        try:
            request = urllib.request.Request(
                url,
                data=body,
                method="POST",
                headers={"Content-Type": "application/json"},
            )
            with self.opener.open(request, timeout=timeout) as response:
                raw = response.read(_MAX_BODY_BYTES)
        except urllib.error.HTTPError as exc:
            try:
                raw = exc.read(_MAX_BODY_BYTES)
            except (OSError, AttributeError) as read_exc:
                raise TelegramError(
                    f"telegram: {method} read body: {redact_error(read_exc, self.token)}"
                ) from None
            finally:
                exc.close()
        except (urllib.error.URLError, OSError, ValueError) as exc:
            raise TelegramError(
                f"telegram: {method} transport: {redact_error(exc, self.token)}"
            ) from None

        try:
            envelope = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise TelegramError(f"telegram: {method} decode envelope: {exc}") from None
        if not isinstance(envelope, Mapping):
            raise TelegramError(f"telegram: {method} decode envelope: expected an object")
        if envelope.get("ok") is not True:
            description = envelope.get("description") or ""
            code = envelope.get("error_code") or 0
            raise TelegramError(f"telegram: {method} failed: {description} (code={code})")
        return envelope.get("result")