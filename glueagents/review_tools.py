"""Tools for a code-review agent: branch diff, branch log and guarded file reads."""

from __future__ import annotations

import json
import os
import shutil
import subprocess
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

from .blocklist import merge_blocklist, path_blocked

__all__ = [
    "ToolResult",
    "ReviewTool",
    "GitError",
    "review_tools",
    "build_pathspec",
    "git_diff_branch_tool",
    "git_log_branch_tool",
    "read_file_tool",
    "run_git",
    "safe_join",
    "truncate",
    "DEFAULT_DIFF_MAX_BYTES",
    "DEFAULT_LOG_LIMIT",
    "DEFAULT_READ_MAX_BYTES",
]

DEFAULT_DIFF_MAX_BYTES = 200 * 1024
DEFAULT_LOG_LIMIT = 50
DEFAULT_READ_MAX_BYTES = 80 * 1024

_GIT_TIMEOUT_SECONDS = 15
_TRUNCATION_NOTE = "\n\n[... truncated]"


class GitError(RuntimeError):
    """Raised when the git binary is missing or a git command fails."""


@dataclass(frozen=True)
class ToolResult:
    """Text handed back to the model; ``is_error`` marks a failed call."""

    text: str
    is_error: bool = False

    @classmethod
    def error(cls, exc: Union[BaseException, str]) -> "ToolResult":
        return cls(text=str(exc), is_error=True)


Arguments = Union[str, bytes, Mapping[str, Any], None]


class _ArgumentError(ValueError):
    pass


@dataclass(frozen=True)
class ReviewTool:
    """A named tool with a JSON-schema parameter spec and a handler."""

    name: str
    description: str
    parameters: Dict[str, Any]
    handler: Callable[[Dict[str, Any]], ToolResult] = field(repr=False)

    def execute(self, arguments: Arguments = None) -> ToolResult:
        """Decode JSON ``arguments`` and run the tool.

        Malformed arguments and tool failures come back as error results
        rather than exceptions, so the model can see and react to them.
        """
        try:
            args = _decode_arguments(arguments)
        except _ArgumentError as exc:
            return ToolResult.error(f"{self.name}: {exc}")
        try:
            return self.handler(args)
        except _ArgumentError as exc:
            return ToolResult.error(f"{self.name}: {exc}")


def _decode_arguments(arguments: Arguments) -> Dict[str, Any]:
    if arguments is None:
        return {}
    if isinstance(arguments, Mapping):
        return dict(arguments)
    if isinstance(arguments, bytes):
        arguments = arguments.decode("utf-8", errors="replace")
    if not arguments.strip():
        return {}
    try:
        decoded = json.loads(arguments)
    except json.JSONDecodeError as exc:
        raise _ArgumentError(f"decode arguments: {exc}") from exc
    if decoded is None:
        return {}
    if not isinstance(decoded, dict):
        raise _ArgumentError("decode arguments: expected a JSON object")
    return decoded


def _str_arg(args: Mapping[str, Any], key: str) -> str:
    value = args.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise _ArgumentError(f"argument {key!r} must be a string")
    return value


def _int_arg(args: Mapping[str, Any], key: str) -> int:
    value = args.get(key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise _ArgumentError(f"argument {key!r} must be an integer")
    if isinstance(value, float) and not value.is_integer():
        raise _ArgumentError(f"argument {key!r} must be an integer")
    return int(value)


def review_tools(
    work_dir: str,
    extra_blocked: Optional[Sequence[str]] = None,
    paths: Optional[Sequence[str]] = None,
    paths_ignore: Optional[Sequence[str]] = None,
) -> List[ReviewTool]:
    """Return the reviewer's toolbox: branch diff, branch log and file reader."""
    blocked = merge_blocklist(extra_blocked)
    pathspec = build_pathspec(paths, paths_ignore)
    return [
        git_diff_branch_tool(work_dir, pathspec),
        git_log_branch_tool(work_dir),
        read_file_tool(work_dir, blocked),
    ]


def build_pathspec(
    paths: Optional[Sequence[str]], paths_ignore: Optional[Sequence[str]]
) -> Optional[List[str]]:
    """Turn include / exclude globs into git pathspec arguments.

    Returns ``None`` when there are no filters. With only excludes, a ``*``
    catch-all include is added so git reads them as "everything except".
    """
    paths = list(paths or ())
    paths_ignore = list(paths_ignore or ())
    if not paths and not paths_ignore:
        return None
    out = list(paths)
    if not out and paths_ignore:
        out.append("*")
    out.extend(f":(exclude){p}" for p in paths_ignore)
    return out


def git_diff_branch_tool(
    work_dir: str, pathspec: Optional[Sequence[str]] = None
) -> ReviewTool:
    """Tool showing the diff of HEAD against a base ref, narrowed by ``pathspec``."""
    pathspec = list(pathspec or ())

    def handler(args: Dict[str, Any]) -> ToolResult:
        base = _str_arg(args, "base").strip() or "main"
        limit = _int_arg(args, "max_bytes")
        if limit <= 0:
            limit = DEFAULT_DIFF_MAX_BYTES
        git_args = ["diff", "--no-color", f"{base}...HEAD"]
        if pathspec:
            git_args.append("--")
            git_args.extend(pathspec)
        try:
            out = run_git(work_dir, *git_args)
        except GitError as exc:
            return ToolResult.error(exc)
        return ToolResult(truncate(out, limit))

    return ReviewTool(
        name="git_diff_branch",
        description=(
            "Show the diff of the current branch versus a base ref (default 'main'). "
            "Includes file additions, deletions, and modifications. The diff may be "
            "pre-filtered by deployment-supplied path globs — only files in scope "
            "appear. Use this first to scope the review."
        ),
        parameters={
            "type": "object",
            "properties": {
                "base": {
                    "type": "string",
                    "description": "Base ref to diff against. Default 'main'.",
                },
                "max_bytes": {
                    "type": "integer",
                    "description": "Cap on returned diff size in bytes. Default 204800.",
                },
            },
        },
        handler=handler,
    )


def git_log_branch_tool(work_dir: str) -> ReviewTool:
    """Tool showing the commit history of HEAD since a base ref."""

    def handler(args: Dict[str, Any]) -> ToolResult:
        base = _str_arg(args, "base").strip() or "main"
        limit = _int_arg(args, "limit")
        if limit <= 0:
            limit = DEFAULT_LOG_LIMIT
        try:
            out = run_git(
                work_dir,
                "log",
                "--no-color",
                f"-n{limit}",
                "--pretty=format:%h %an  %s%n%b%n---",
                f"{base}..HEAD",
            )
        except GitError as exc:
            return ToolResult.error(exc)
        return ToolResult(out)

    return ReviewTool(
        name="git_log_branch",
        description=(
            "Show the commit history of the current branch since a base ref "
            "(default 'main'). Useful for reading commit messages to understand "
            "author intent."
        ),
        parameters={
            "type": "object",
            "properties": {
                "base": {"type": "string", "description": "Base ref. Default 'main'."},
                "limit": {
                    "type": "integer",
                    "description": "Max commits returned. Default 50.",
                },
            },
        },
        handler=handler,
    )


def read_file_tool(
    work_dir: str, blocked_patterns: Optional[Sequence[str]] = None
) -> ReviewTool:
    """Tool reading a text file under ``work_dir``, refusing blocked paths."""
    blocked_patterns = list(blocked_patterns or ())

    def handler(args: Dict[str, Any]) -> ToolResult:
        rel = _str_arg(args, "path")
        # Checked before resolution so the message is stable whether or not
        # the file exists.
        pattern = path_blocked(rel, blocked_patterns)
        if pattern is not None:
            return ToolResult.error(
                f"path {json.dumps(rel)} is blocked by sensitive-file pattern "
                f"{json.dumps(pattern)}; do not retry"
            )
        try:
            resolved = safe_join(work_dir, rel)
        except ValueError as exc:
            return ToolResult.error(exc)
        limit = _int_arg(args, "max_bytes")
        if limit <= 0:
            limit = DEFAULT_READ_MAX_BYTES
        try:
            with open(resolved, "rb") as fh:
                data = fh.read(limit + 1)
        except OSError as exc:
            return ToolResult.error(exc)
        return ToolResult(truncate(data.decode("utf-8", errors="replace"), limit))

    return ReviewTool(
        name="read_file",
        description=(
            "Read a UTF-8 text file from the working directory. Returns the file "
            "content, truncated if larger than max_bytes. Use this to inspect files "
            "mentioned in the diff when surrounding context is needed. Refuses to "
            "open secret-shaped files (.env, id_rsa, *.pem, credentials.json, etc.)."
        ),
        parameters={
            "type": "object",
            "properties": {
                "path": {
                    "type": "string",
                    "description": (
                        "Path relative to the working directory. "
                        "'..' traversal is rejected."
                    ),
                },
                "max_bytes": {
                    "type": "integer",
                    "description": "Cap on returned bytes. Default 81920.",
                },
            },
            "required": ["path"],
        },
        handler=handler,
    )


def run_git(work_dir: str, *args: str) -> str:
    """Run ``git`` with ``args`` in ``work_dir`` and return its stdout.

    Raises :class:`GitError` when git is missing, times out or exits non-zero.
    """
    if shutil.which("git") is None:
        raise GitError("git binary not found in PATH")
    joined = " ".join(args)
    try:
        proc = subprocess.run(
            ["git", *args],
            cwd=work_dir,
            capture_output=True,
            timeout=_GIT_TIMEOUT_SECONDS,
        )
    except subprocess.TimeoutExpired as exc:
        raise GitError(f"git {joined}: timed out after {_GIT_TIMEOUT_SECONDS}s") from exc
    except OSError as exc:
        raise GitError(f"git {joined}: {exc}") from exc
    if proc.returncode != 0:
        stderr = proc.stderr.decode("utf-8", errors="replace").strip()
        raise GitError(f"git {joined}: exit status {proc.returncode} ({stderr})")
    return proc.stdout.decode("utf-8", errors="replace")


def safe_join(base: str, rel: str) -> str:
    """Resolve ``rel`` under ``base`` and return the absolute path.

    Raises :class:`ValueError` for empty or absolute paths and for paths
    that escape ``base``.
    """
    rel = rel.strip()
    if not rel:
        raise ValueError("path is required")
    if os.path.isabs(rel):
        raise ValueError("absolute paths are not allowed")
    abs_base = os.path.abspath(base)
    candidate = os.path.normpath(os.path.join(abs_base, rel))
    relative = os.path.relpath(candidate, abs_base)
    if relative.startswith(".."):
        raise ValueError(f"path {json.dumps(rel)} escapes work directory")
    return candidate


def truncate(s: str, max_bytes: int) -> str:
    """Cap ``s`` at ``max_bytes`` UTF-8 bytes, ending with a truncation note when room allows."""
    data = s.encode("utf-8")
    if len(data) <= max_bytes:
        return s
    note = _TRUNCATION_NOTE.encode("utf-8")
    if max_bytes <= len(note):
        return data[:max_bytes].decode("utf-8", errors="ignore")
    head = data[: max_bytes - len(note)].decode("utf-8", errors="ignore")
    return head + _TRUNCATION_NOTE