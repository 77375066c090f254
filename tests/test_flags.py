import argparse

import pytest

from glueagents.flags import (
    STANDARD_FLAG_DEFAULTS,
    StandardConfig,
    register_standard_flags,
)


def _parser():
    return argparse.ArgumentParser(prog="test", exit_on_error=False)


def test_defaults_round_trip():
    parser = _parser()
    get = register_standard_flags(parser, None)
    got = get(parser.parse_args([]))
    assert got == STANDARD_FLAG_DEFAULTS


def test_documented_defaults():
    assert STANDARD_FLAG_DEFAULTS == StandardConfig(
        provider="nvidia",
        model="",
        id="default",
        store=".glue/sessions",
        work=".",
        max_turns=32,
    )


def test_parses_argv():
    parser = _parser()
    get = register_standard_flags(parser, None)
    args = [
        "--provider", "openrouter,gemini",
        "--model", "openrouter/free",
        "--id", "review",
        "--store", "/tmp/sessions",
        "--work", "/repo",
        "--max-turns", "8",
    ]
    got = get(parser.parse_args(args))
    assert got == StandardConfig(
        provider="openrouter,gemini",
        model="openrouter/free",
        id="review",
        store="/tmp/sessions",
        work="/repo",
        max_turns=8,
    )


def test_defaults_override():
    parser = _parser()
    get = register_standard_flags(
        parser,
        StandardConfig(provider="openrouter", store=".myagent/sessions", max_turns=16),
    )
    got = get(parser.parse_args([]))
    assert got.provider == "openrouter"
    assert got.store == ".myagent/sessions"
    assert got.max_turns == 16
    assert got.id == STANDARD_FLAG_DEFAULTS.id
    assert got.work == STANDARD_FLAG_DEFAULTS.work


def test_max_turns_must_be_integer():
    parser = _parser()
    register_standard_flags(parser, None)
    with pytest.raises(argparse.ArgumentError):
        parser.parse_args(["--max-turns", "lots"])