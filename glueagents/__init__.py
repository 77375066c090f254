"""Building blocks for tool-using LLM agents: flags, blocklist, review tools, settings and a Telegram client."""

__version__ = "0.1.0"

__all__ = [
    "blocklist",
    "flags",
    "review_tools",
    "settings",
    "telegram_api",
    "telegram_config",
]