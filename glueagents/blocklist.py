"""Sensitive-file blocklist: glob patterns a file-reading tool refuses to open."""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Iterable, List, Optional, Pattern

__all__ = [
    "default_blocked_patterns",
    "glob_match",
    "path_blocked",
    "merge_blocklist",
    "split_comma_list",
]


def default_blocked_patterns() -> List[str]:
    """Return a fresh list of the built-in secret-shaped file patterns."""
    return [
        # Environment / secret bag dotfiles
        ".env",
        ".env.*",
        ".envrc",
        ".npmrc",
        ".netrc",
        ".pgpass",
        # SSH / key material
        "id_rsa", "id_rsa.*",
        "id_ed25519", "id_ed25519.*",
        "id_dsa", "id_dsa.*",
        "id_ecdsa", "id_ecdsa.*",
        "*.pem",
        "*.key",
        "*.p12",
        "*.pfx",
        "*.jks",
        # Cloud / service account credentials
        "credentials",
        "credentials.json",
        "service-account*.json",
        "client-secret*.json",
        "*.kubeconfig",
        # Generic "secret" naming
        "*_secret*",
        "*_secrets*",
        "*.secret",
        "*.secrets",
        "secret.*",
        "secrets.*",
        "secrets",
        # Cloud CLI credential dirs
        ".aws",
        ".gcloud",
        ".azure",
    ]


class _BadPattern(ValueError):
    pass


def _class_char(pattern: str, i: int) -> tuple[str, int]:
    if i >= len(pattern) or pattern[i] in "-]":
        raise _BadPattern(pattern)
    if pattern[i] == "\\":
        i += 1
        if i >= len(pattern):
            raise _BadPattern(pattern)
    return pattern[i], i + 1


@lru_cache(maxsize=512)
def _compile(pattern: str) -> Pattern[str]:
    out: list[str] = []
    i, n = 0, len(pattern)
    while i < n:
        c = pattern[i]
        if c == "*":
            out.append("[^/]*")
            i += 1
        elif c == "?":
            out.append("[^/]")
            i += 1
        elif c == "\\":
            if i + 1 >= n:
                raise _BadPattern(pattern)
            out.append(re.escape(pattern[i + 1]))
            i += 2
        elif c == "[":
            i += 1
            negate = i < n and pattern[i] == "^"
            if negate:
                i += 1
            ranges: list[tuple[str, str]] = []
            while True:
                if i >= n:
                    raise _BadPattern(pattern)
                if pattern[i] == "]" and ranges:
                    i += 1
                    break
                lo, i = _class_char(pattern, i)
                hi = lo
                if i < n and pattern[i] == "-":
                    hi, i = _class_char(pattern, i + 1)
                ranges.append((lo, hi))
            items = "".join(
                f"{re.escape(lo)}-{re.escape(hi)}" for lo, hi in ranges if lo <= hi
            )
            if negate:
                out.append(f"[^{items}]" if items else ".")
            else:
                out.append(f"[{items}]" if items else "(?!)")
        else:
            out.append(re.escape(c))
            i += 1
    return re.compile("".join(out), re.DOTALL)


def glob_match(pattern: str, name: str) -> bool:
    """Match ``name`` against a shell glob.

    ``*`` and ``?`` never match ``/``; ``[...]`` classes support ranges,
    ``^`` negation and ``\\`` escapes. A malformed pattern matches nothing.
    """
    try:
        regex = _compile(pattern)
    except _BadPattern:
        return False
    return regex.fullmatch(name) is not None


def _basename(path: str) -> str:
    if path == "":
        return "."
    stripped = path.rstrip("/")
    if stripped == "":
        return "/"
    return stripped.rsplit("/", 1)[-1]


def path_blocked(rel: str, patterns: Iterable[str]) -> Optional[str]:
    """Return the pattern that blocks ``rel``, or ``None`` when it is allowed.

    Each pattern is tried against the whole path (case-sensitive), then the
    basename and every path component (case-insensitive).
    """
    clean = rel.strip()
    if not clean:
        return None
    base = _basename(clean).lower()
    parts = [p.lower() for p in clean.split("/")]

    for pat in patterns:
        pat = pat.strip()
        if not pat:
            continue
        if glob_match(pat, clean):
            return pat
        lowered = pat.lower()
        if glob_match(lowered, base):
            return pat
        if any(glob_match(lowered, part) for part in parts):
            return pat
    return None


def merge_blocklist(extras: Optional[Iterable[str]]) -> List[str]:
    """Return the default patterns followed by trimmed, de-duplicated extras."""
    out = default_blocked_patterns()
    seen = set(out)
    for p in extras or ():
        p = p.strip()
        if not p or p in seen:
            continue
        seen.add(p)
        out.append(p)
    return out


def split_comma_list(s: str) -> List[str]:
    """Split a comma-separated string into trimmed, non-empty items."""
    return [p.strip() for p in s.split(",") if p.strip()]