"""Unit tests for refresh-token persistence."""

import pytest

from spotify_remote.credential_store import CredentialStore


def test_load_missing_file_returns_none(store):
    assert store.load() is None


def test_load_blank_file_returns_none(store):
    store.path.write_text("  \n", encoding="utf-8")

    assert store.load() is None


def test_load_trims_whitespace(store):
    store.path.write_text("abc123\n", encoding="utf-8")

    assert store.load() == "abc123"


def test_save_overwrites_previous_secret(store):
    store.save("first")
    store.save("second")

    assert store.path.read_text(encoding="utf-8") == "second"
    assert store.load() == "second"


def test_save_rejects_empty_secret(store):
    with pytest.raises(ValueError):
        store.save("   ")

    assert not store.path.exists()


def test_unreadable_path_raises_oserror(tmp_path):
    """A directory where the token file should be is an I/O failure, not 'no token'."""
    (tmp_path / "token.json").mkdir()
    store = CredentialStore(tmp_path / "token.json")

    with pytest.raises(OSError):
        store.load()
