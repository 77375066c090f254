"""Shared command-line flags for agents: provider, model, session id, store, work dir, turn budget."""

from __future__ import annotations

import argparse
from dataclasses import dataclass, replace
from typing import Callable, Optional

__all__ = ["StandardConfig", "STANDARD_FLAG_DEFAULTS", "register_standard_flags"]


@dataclass(frozen=True)
class StandardConfig:
    """Parsed values of the six common agent flags.

    ``provider`` may be a single name or a comma-separated failover list.
    An empty ``model`` means "use the active provider's default model".
    A zero or negative ``max_turns`` is forwarded unchanged so callers can
    apply their own default.
    """

    provider: str = ""
    model: str = ""
    id: str = ""
    store: str = ""
    work: str = ""
    max_turns: int = 0


STANDARD_FLAG_DEFAULTS = StandardConfig(
    provider="nvidia",
    model="",
    id="default",
    store=".glue/sessions",
    work=".",
    max_turns=32,
)

_DESTS = {
    "provider": "provider",
    "model": "model",
    "id": "id",
    "store": "store",
    "work": "work",
    "max_turns": "max_turns",
}


def _merge_defaults(overrides: Optional[StandardConfig]) -> StandardConfig:
    base = STANDARD_FLAG_DEFAULTS
    if overrides is None:
        return base
    changes = {
        name: value
        for name, value in vars(overrides).items()
        if value not in ("", 0)
    }
    return replace(base, **changes)


def register_standard_flags(
    parser: argparse.ArgumentParser,
    defaults: Optional[StandardConfig] = None,
) -> Callable[[argparse.Namespace], StandardConfig]:
    """Add the six standard flags to ``parser``.

    Fields of ``defaults`` that are set (non-empty, non-zero) replace the
    matching entry of :data:`STANDARD_FLAG_DEFAULTS`. Returns a function that
    turns the namespace produced by ``parser.parse_args`` into a
    :class:`StandardConfig`.
    """
    d = _merge_defaults(defaults)

    parser.add_argument(
        "--provider",
        dest=_DESTS["provider"],
        default=d.provider,
        help=(
            "provider name; comma-separated list (e.g. 'nvidia,openrouter,gemini') "
            "asks the agent to fail over to the first whose API key is set"
        ),
    )
    parser.add_argument(
        "--model",
        dest=_DESTS["model"],
        default=d.model,
        help="model id (defaults to the active provider's DefaultModel)",
    )
    parser.add_argument(
        "--id",
        dest=_DESTS["id"],
        default=d.id,
        help="session id (file-backed sessions key off this)",
    )
    parser.add_argument(
        "--store",
        dest=_DESTS["store"],
        default=d.store,
        help="session store directory",
    )
    parser.add_argument(
        "--work",
        dest=_DESTS["work"],
        default=d.work,
        help=(
            "working directory (used for AGENTS.md / skills / roles discovery "
            "and as the cwd for filesystem tools)"
        ),
    )
    parser.add_argument(
        "--max-turns",
        dest=_DESTS["max_turns"],
        type=int,
        default=d.max_turns,
        help="loop budget — caps total assistant turns",
    )

    def get(namespace: argparse.Namespace) -> StandardConfig:
        return StandardConfig(
            **{field: getattr(namespace, dest) for field, dest in _DESTS.items()}
        )

    return get