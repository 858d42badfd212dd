# tests/test_config.py
"""
Tests for workspace seeding, TOML profiles and the runtime settings layer.
"""

from __future__ import annotations

import pytest

from semiprimefinder import config as CONFIG
from semiprimefinder.runtime import APPLY, CFG, Runtime
from semiprimefinder.runtime import current as _rt_current
from semiprimefinder.utility import UserInputError, flatten_dotted, parse_size
from semiprimefinder.workspace import ensure_workspace_seeded, seed_workspace, workspace_dir

PACKAGED = ["default", "full", "screen"]


def test_workspace_follows_environment(workspace):
    assert workspace_dir() == workspace.resolve()


def test_seeding_copies_packaged_profiles(workspace):
    root, seeded, copied = ensure_workspace_seeded()
    assert root == workspace.resolve()
    assert seeded is True
    assert copied == {"profiles": len(PACKAGED)}
    assert (workspace / "results").is_dir()

    # second call copies nothing new
    _, seeded, copied = ensure_workspace_seeded()
    assert seeded is False
    assert copied == {"profiles": 0}


def test_seeding_keeps_user_edits_unless_overwrite(workspace):
    ensure_workspace_seeded()
    path = workspace / "profiles" / "default.toml"
    path.write_text('[SEARCH]\nSIZES = [7]\n', encoding="utf-8")

    ensure_workspace_seeded()
    assert "SIZES = [7]" in path.read_text(encoding="utf-8")

    seed_workspace(overwrite=True)
    assert "SIZES = [7]" not in path.read_text(encoding="utf-8")


def test_list_profiles():
    assert CONFIG.list_all_profiles() == PACKAGED
    names = [name for name, _ in CONFIG.list_profiles_with_descriptions()]
    assert names == PACKAGED


def test_load_default_profile():
    ensure_workspace_seeded()
    settings = CONFIG.load_settings(None)
    assert settings.name == "default"
    assert "_PROFILE_" not in settings.as_dict()
    assert settings.data["SEARCH"]["SIZES"] == [100_000]
    assert settings.data["SEARCH"]["COLLISION_POLICY"] == "overwrite"
    assert settings.description != "(no description)"


def test_profile_without_metadata(workspace):
    ensure_workspace_seeded()
    (workspace / "profiles" / "bare.toml").write_text("[SEARCH]\nSIZES = [10, 20]\n", encoding="utf-8")
    settings = CONFIG.load_settings("bare")
    assert settings.name == "bare"
    assert settings.description == "(no description)"
    assert settings.data["SEARCH"]["SIZES"] == [10, 20]


def test_broken_toml_is_a_user_error(workspace):
    ensure_workspace_seeded()
    (workspace / "profiles" / "broken.toml").write_text("[SEARCH\nSIZES = 1\n", encoding="utf-8")
    with pytest.raises(UserInputError, match="broken.toml"):
        CONFIG.load_settings("broken")


@pytest.mark.parametrize(
    "body",
    ['SIZES = 10', 'SIZES = ["10"]', 'SIZES = [true]', 'COLLISION_POLICY = 3', 'COLLISION_POLICY = "merge"'],
)
def test_bad_search_section_is_a_user_error(workspace, body):
    ensure_workspace_seeded()
    (workspace / "profiles" / "bad.toml").write_text(f"[SEARCH]\n{body}\n", encoding="utf-8")
    with pytest.raises(UserInputError):
        CONFIG.load_settings("bad")


def test_missing_profile():
    ensure_workspace_seeded()
    assert not CONFIG.has_profile("nope")
    with pytest.raises(FileNotFoundError):
        CONFIG.load_settings("nope")


def test_current_profile_roundtrip():
    assert CONFIG.read_current_profile() is None
    CONFIG.write_current_profile("full.toml")
    assert CONFIG.read_current_profile() == "full"


# ---------- runtime -----------------------------------------------------------


def test_apply_and_dotted_lookup():
    ensure_workspace_seeded()
    APPLY(CONFIG.load_settings("screen"))
    rt = _rt_current()
    assert rt.profile_name == "screen"
    assert CFG("SEARCH.COLLISION_POLICY") == "keep_first"
    assert CFG("SEARCH.SIZES") == [1_000]
    assert CFG("SEARCH.NOPE", 42) == 42
    assert CFG("NOPE.NOPE") is None
    assert CFG("", "x") == "x"
    assert rt.progress is False


def test_apply_syncs_flags_from_plain_dict():
    rt = Runtime()
    rt.apply({"BEHAVIOUR": {"DEBUG": True, "PROGRESS": False}})
    assert rt.debug is True
    assert rt.progress is False
    assert rt.get("BEHAVIOUR") == {"DEBUG": True, "PROGRESS": False}


def test_flatten_dotted():
    assert flatten_dotted({"A": {"B": 1, "C": {"D": 2}}, "E": 3}) == {"A.B": 1, "A.C.D": 2, "E": 3}


@pytest.mark.parametrize(
    "text,expected",
    [
        ("100", 100),
        ("10_000", 10_000),
        ("1,000", 1000),
        ("1e6", 1_000_000),
        ("0", 0),
        ("default", None),
        ("1.5e3", None),
        ("", None),
    ],
)
def test_parse_size(text, expected):
    assert parse_size(text) == expected


def test_parse_negative_size_is_a_user_error():
    with pytest.raises(UserInputError):
        parse_size("-10")
