"""Assistant configuration (settings.json) and identity (SOUL.md) loading."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

__all__ = [
    "ENV_CONFIG_PATH",
    "ENV_SOUL_PATH",
    "XDG_CONFIG_ENV",
    "DEFAULT_PROVIDER",
    "SOUL_BASENAME",
    "StoreSettings",
    "CompactionSettings",
    "Settings",
    "SettingsError",
    "load_settings",
    "load_soul",
    "xdg_config_home",
    "expand_path",
    "fill_defaults",
]

ENV_CONFIG_PATH = "PEGGY_CONFIG"
ENV_SOUL_PATH = "PEGGY_SOUL"
XDG_CONFIG_ENV = "XDG_CONFIG_HOME"

DEFAULT_PROVIDER = "codex"
SOUL_BASENAME = "SOUL.md"

_DEFAULT_STORE_TYPE = "sqlite"
_DEFAULT_THRESHOLD = 200
_DEFAULT_TARGET_TOKENS = 8000
_DEFAULT_KEEP_RECENT = 8


class SettingsError(Exception):
    """Raised when settings or identity files cannot be resolved, read or parsed."""


@dataclass(frozen=True)
class StoreSettings:
    """Session persistence: ``type`` is "sqlite" or "file"; ``path`` is the DB file or directory."""

    type: str = ""
    path: str = ""


@dataclass(frozen=True)
class CompactionSettings:
    """Transcript compaction knobs; ``threshold`` is the message count that triggers it."""

    target_tokens: int = 0
    keep_recent: int = 0
    threshold: int = 0


def _get_str(data: Mapping[str, Any], key: str, where: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise SettingsError(f"{where}{key}: expected a string, got {type(value).__name__}")
    return value


def _get_int(data: Mapping[str, Any], key: str, where: str) -> int:
    value = data.get(key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise SettingsError(f"{where}{key}: expected an integer, got {type(value).__name__}")
    return value


def _get_obj(data: Mapping[str, Any], key: str, where: str) -> Mapping[str, Any]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise SettingsError(f"{where}{key}: expected an object, got {type(value).__name__}")
    return value


@dataclass(frozen=True)
class Settings:
    """The settings.json document. ``channels`` keeps each channel's raw subtree."""

    provider: str = ""
    model: str = ""
    store: StoreSettings = field(default_factory=StoreSettings)
    compaction: CompactionSettings = field(default_factory=CompactionSettings)
    channels: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> "Settings":
        """Build settings from decoded JSON; unknown keys are ignored."""
        if data is None:
            return cls()
        if not isinstance(data, Mapping):
            raise SettingsError(f"expected a JSON object, got {type(data).__name__}")
        store = _get_obj(data, "store", "")
        compaction = _get_obj(data, "compaction", "")
        return cls(
            provider=_get_str(data, "provider", ""),
            model=_get_str(data, "model", ""),
            store=StoreSettings(
                type=_get_str(store, "type", "store."),
                path=_get_str(store, "path", "store."),
            ),
            compaction=CompactionSettings(
                target_tokens=_get_int(compaction, "target_tokens", "compaction."),
                keep_recent=_get_int(compaction, "keep_recent", "compaction."),
                threshold=_get_int(compaction, "threshold", "compaction."),
            ),
            channels=dict(_get_obj(data, "channels", "")),
        )


def _home_dir() -> Optional[str]:
    home = os.environ.get("HOME")
    if home:
        return home
    try:
        resolved = str(Path.home())
    except (RuntimeError, KeyError):
        return None
    return resolved or None


def xdg_config_home() -> str:
    """Return ``$XDG_CONFIG_HOME``, else ``~/.config``, else an empty string."""
    value = os.environ.get(XDG_CONFIG_ENV)
    if value:
        return value
    home = _home_dir()
    if home is None:
        return ""
    return os.path.join(home, ".config")


def expand_path(p: str) -> str:
    """Expand a leading ``~`` and ``$HOME`` / ``${HOME}``; other variables are left alone."""
    if not p:
        return ""
    if p.startswith("~"):
        home = _home_dir()
        if home is None:
            raise SettingsError("peggy: resolve ~: home directory is not known")
        rest = p[1:].lstrip("/" + os.sep)
        p = os.path.normpath(os.path.join(home, rest)) if rest else os.path.normpath(home)
    home_env = os.environ.get("HOME", "")
    p = p.replace("${HOME}", home_env)
    p = p.replace("$HOME", home_env)
    return p


def fill_defaults(s: Settings) -> Settings:
    """Return ``s`` with every zero-valued field replaced by its documented default."""
    store_type = s.store.type or _DEFAULT_STORE_TYPE
    store_path = s.store.path
    if not store_path:
        home = _home_dir() or ""
        if store_type == "sqlite":
            store_path = os.path.join(home, ".peggy", "peggy.db")
        elif store_type == "file":
            store_path = os.path.join(home, ".peggy", "sessions")
    c = s.compaction
    return replace(
        s,
        provider=s.provider or DEFAULT_PROVIDER,
        store=StoreSettings(type=store_type, path=store_path),
        compaction=CompactionSettings(
            target_tokens=c.target_tokens if c.target_tokens != 0 else _DEFAULT_TARGET_TOKENS,
            keep_recent=c.keep_recent if c.keep_recent != 0 else _DEFAULT_KEEP_RECENT,
            threshold=c.threshold if c.threshold != 0 else _DEFAULT_THRESHOLD,
        ),
    )


def _exists(path: str) -> bool:
    try:
        os.stat(path)
    except OSError:
        return False
    return True


def _resolve_config_path(explicit: str) -> Optional[str]:
    if explicit:
        expanded = expand_path(explicit)
        try:
            os.stat(expanded)
        except FileNotFoundError:
            raise SettingsError(f"peggy: settings {expanded} does not exist") from None
        except OSError as exc:
            raise SettingsError(f"peggy: settings {expanded}: {exc}") from exc
        return expanded
    from_env = os.environ.get(ENV_CONFIG_PATH)
    if from_env:
        expanded = expand_path(from_env)
        if _exists(expanded):
            return expanded
        raise SettingsError(f"peggy: {ENV_CONFIG_PATH}={expanded} does not exist")
    candidate = os.path.join(xdg_config_home(), "peggy", "settings.json")
    if _exists(candidate):
        return candidate
    return None


def load_settings(path: Optional[str] = None) -> Tuple[Settings, Optional[str]]:
    """Load settings.json and apply defaults.

    Without ``path`` the chain ``$PEGGY_CONFIG`` → ``$XDG_CONFIG_HOME/peggy/settings.json``
    → ``~/.config/peggy/settings.json`` is walked. Returns the settings and the path
    read, or ``None`` when no file was found and built-in defaults were used.
    An explicit path or ``$PEGGY_CONFIG`` that does not exist is an error.
    """
    resolved = _resolve_config_path(path or "")
    if resolved is None:
        return fill_defaults(Settings()), None

    try:
        with open(resolved, "rb") as fh:
            raw = fh.read()
    except OSError as exc:
        raise SettingsError(f"peggy: read {resolved}: {exc}") from exc
    try:
        data = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise SettingsError(f"peggy: parse {resolved}: {exc}") from exc
    try:
        settings = Settings.from_dict(data)
    except SettingsError as exc:
        raise SettingsError(f"peggy: parse {resolved}: {exc}") from exc

    settings = fill_defaults(settings)
    if settings.store.path:
        settings = replace(
            settings,
            store=replace(settings.store, path=expand_path(settings.store.path)),
        )
    return settings, resolved


def _read_soul(path: str, strict: bool) -> Tuple[str, Optional[str]]:
    try:
        with open(path, "rb") as fh:
            data = fh.read()
    except FileNotFoundError:
        if not strict:
            return "", None
        raise SettingsError(f"peggy: SOUL.md {path} does not exist") from None
    except OSError as exc:
        raise SettingsError(f"peggy: read SOUL.md {path}: {exc}") from exc
    return data.decode("utf-8", errors="replace"), path


def load_soul(path: Optional[str] = None) -> Tuple[str, Optional[str]]:
    """Read the identity Markdown file and return ``(contents, path_read)``.

    Without ``path`` the chain ``$PEGGY_SOUL`` → ``$XDG_CONFIG_HOME/peggy/SOUL.md``
    → ``~/.config/peggy/SOUL.md`` is walked. A missing default file yields
    ``("", None)``; a missing explicit or environment-named file is an error.
    """
    if path:
        return _read_soul(expand_path(path), strict=True)
    from_env = os.environ.get(ENV_SOUL_PATH)
    if from_env:
        return _read_soul(expand_path(from_env), strict=True)
    candidate = os.path.join(xdg_config_home(), "peggy", SOUL_BASENAME)
    return _read_soul(candidate, strict=False)