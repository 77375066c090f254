import pytest

from glueagents.blocklist import (
    default_blocked_patterns,
    glob_match,
    merge_blocklist,
    path_blocked,
    split_comma_list,
)


@pytest.fixture
def patterns():
    return default_blocked_patterns()


def test_defaults_contain_documented_patterns(patterns):
    for pat in (".env", "id_rsa", "*.pem", "credentials.json", "secrets", ".aws"):
        assert pat in patterns


def test_defaults_returns_fresh_list():
    first = default_blocked_patterns()
    first.append("extra")
    assert "extra" not in default_blocked_patterns()


def test_glob_star_does_not_cross_separator():
    assert glob_match("*.pem", "server.pem")
    assert not glob_match("*", "a/b")
    assert glob_match("*/*", "a/b")


def test_glob_question_and_class():
    assert glob_match("id_?sa", "id_rsa")
    assert glob_match("[a-c]x", "bx")
    assert not glob_match("[a-c]x", "dx")
    assert glob_match("[^a-c]x", "dx")
    assert not glob_match("[^a-c]x", "ax")


def test_glob_escape():
    assert glob_match("\\*", "*")
    assert not glob_match("\\*", "a")


@pytest.mark.parametrize("bad", ["[", "[]", "abc\\", "[-a]", "[a-"])
def test_glob_malformed_matches_nothing(bad):
    assert not glob_match(bad, bad)
    assert not glob_match(bad, "a")


def test_whole_path_match(patterns):
    assert path_blocked(".env", patterns) == ".env"


def test_basename_match(patterns):
    assert path_blocked("deploy/server.pem", patterns) == "*.pem"


def test_component_match(patterns):
    assert path_blocked("secrets/foo.txt", patterns) == "secrets"
    assert path_blocked("home/.aws/config", patterns) == ".aws"


def test_case_insensitive_basename(patterns):
    assert path_blocked(".ENV", patterns) == ".env"
    assert path_blocked("Credentials.json", patterns) == "credentials.json"


def test_allowed_paths(patterns):
    assert path_blocked("src/main.go", patterns) is None
    assert path_blocked("README.md", patterns) is None


def test_blank_path_never_blocked(patterns):
    assert path_blocked("", patterns) is None
    assert path_blocked("   ", patterns) is None


def test_blank_patterns_ignored():
    assert path_blocked(".env", ["", "   "]) is None


def test_merge_empty_extras_equals_defaults():
    assert merge_blocklist(None) == default_blocked_patterns()
    assert merge_blocklist([]) == default_blocked_patterns()


def test_merge_appends_trimmed_unique():
    merged = merge_blocklist([" *.sqlite ", ".env", "", "*.sqlite"])
    defaults = default_blocked_patterns()
    assert merged[: len(defaults)] == defaults
    assert merged[len(defaults):] == ["*.sqlite"]


def test_merged_extra_blocks_path():
    merged = merge_blocklist(["*.sqlite"])
    assert path_blocked("data/app.sqlite", merged) == "*.sqlite"


def test_split_comma_list():
    assert split_comma_list(" a, ,b ,, c") == ["a", "b", "c"]
    assert split_comma_list("") == []
    assert split_comma_list("   ") == []