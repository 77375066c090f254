# glueagents

Small, dependency-free building blocks for tool-using LLM agents. Everything
is in the standard library; Python 3.10 or later.

## Modules

- **`glueagents.flags`** — `register_standard_flags(parser, defaults=None)`
  adds six options to an `argparse.ArgumentParser`: `--provider`, `--model`,
  `--id`, `--store`, `--work` and `--max-turns`. It returns a function that
  turns the parsed namespace into a `StandardConfig`. The built-in values are
  in `STANDARD_FLAG_DEFAULTS` (`provider="nvidia"`, `id="default"`,
  `store=".glue/sessions"`, `work="."`, `max_turns=32`). A partial
  `StandardConfig` passed as `defaults` overrides only the fields that are
  set (non-empty, non-zero).
- **`glueagents.blocklist`** — glob patterns for secret-shaped files
  (`.env`, `id_rsa`, `*.pem`, `credentials.json`, `.aws`, ...) from
  `default_blocked_patterns()`. `path_blocked(rel, patterns)` returns the
  pattern that blocks a relative path, or `None`; each pattern is tried
  against the whole path, then case-insensitively against the basename and
  every path component. `merge_blocklist(extras)` appends trimmed,
  de-duplicated extras to the defaults (defaults cannot be removed).
  `split_comma_list` splits a comma-separated option value, and `glob_match`
  is the glob matcher used throughout (`*` and `?` never match `/`).
- **`glueagents.review_tools`** — `review_tools(work_dir, extra_blocked,
  paths, paths_ignore)` returns three `ReviewTool`s: `git_diff_branch`
  (diff of `HEAD` against a base ref, default `main`, capped at 200 KiB),
  `git_log_branch` (commits since the base ref, default 50) and `read_file`
  (a file under the working directory, capped at 80 KiB). Each tool has a
  `name`, a `description`, a JSON-schema `parameters` dict and
  `execute(arguments)`, which takes JSON text, bytes or a mapping and returns
  a `ToolResult(text, is_error)`. `build_pathspec` turns include / exclude
  globs into git pathspec arguments; `safe_join` confines a relative path to
  a base directory (raising `ValueError`); `truncate` caps text at a number
  of UTF-8 bytes; `run_git` runs the system `git` binary and raises
  `GitError` on failure.
- **`glueagents.settings`** — `load_settings(path=None)` reads
  `settings.json` and `load_soul(path=None)` reads the `SOUL.md` identity
  file. Both walk the chain explicit path → `$PEGGY_CONFIG` / `$PEGGY_SOUL`
  → `$XDG_CONFIG_HOME/peggy/` → `~/.config/peggy/`, and return the content
  together with the path that was read (`None` when nothing was found). A
  missing explicit or environment-named file raises `SettingsError`.
  `fill_defaults` applies the defaults (provider `codex`, a sqlite store at
  `~/.peggy/peggy.db`, compaction threshold 200, target 8000 tokens, keep 8),
  and `expand_path` expands `~`, `$HOME` and `${HOME}`.
- **`glueagents.telegram_config`** — `decode_config(raw)` turns the
  `channels.telegram` block (JSON text, bytes, a mapping or `None`) into a
  `TelegramConfig`: the token variable defaults to `PEGGY_TELEGRAM_TOKEN`,
  the long-poll timeout to 30 seconds (capped at 60), the API base URL to
  the public Bot API. An empty `allow_chats` means every chat is refused.
  Malformed input raises `ConfigError`.
- **`glueagents.telegram_api`** — `TelegramAPI(base_url, token, opener)`
  with `get_updates(offset, timeout_seconds)` returning a list of `Update`
  (with `Message`, `Chat` and `User`), and `send_message(chat_id, text)`,
  which truncates text to Telegram's 4096-byte limit. Failures raise
  `TelegramError`; transport errors have the token replaced by
  `<redacted>` through `redact_error`.

## Examples

```python
from glueagents.blocklist import merge_blocklist, path_blocked
from glueagents.review_tools import build_pathspec, truncate

patterns = merge_blocklist(["*.sqlite"])
path_blocked("config/.ENV", patterns)     # ".env"
path_blocked("src/main.py", patterns)     # None

build_pathspec([], ["vendor/**"])         # ["*", ":(exclude)vendor/**"]
build_pathspec([], [])                    # None
truncate("a" * 1000, 100)                 # 100 bytes ending in "[... truncated]"
```

### Standard flags

```python
import argparse
from glueagents.flags import StandardConfig, register_standard_flags

parser = argparse.ArgumentParser()
get = register_standard_flags(parser, StandardConfig(provider="openrouter"))
config = get(parser.parse_args(["--max-turns", "8"]))
# StandardConfig(provider="openrouter", model="", id="default",
#                store=".glue/sessions", work=".", max_turns=8)
```

### Review tools

```python
from glueagents.review_tools import review_tools

tools = review_tools(".", [], ["*.py"], ["tests/**"])
diff_tool = tools[0]
result = diff_tool.execute({"base": "main"})
print(result.is_error, result.text)
```

Tool failures (missing git, a blocked path, traversal outside the working
directory, malformed arguments) come back as an error `ToolResult` rather
than raising, so the model sees the reason.

### Telegram Bot API

```python
from glueagents.telegram_api import TelegramAPI
from glueagents.telegram_config import decode_config

config = decode_config('{"allow_chats": [12345]}')
api = TelegramAPI(config.api_base_url, "token")
for update in api.get_updates(0, config.long_poll_timeout_seconds):
    if update.message and update.message.chat.id in config.allow_chats:
        api.send_message(update.message.chat.id, "Hello back.")
```

## What this package does not do

It provides no agent loop, model provider or session store, and no command
to run. There is no ready-made Telegram bot: the client and configuration are
here, but the polling loop that feeds messages to an assistant and replies is
left to the caller.

## Testing

The test suite uses pytest; install the `test` extra to get it, then run
`pytest`.