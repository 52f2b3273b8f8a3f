"""Tests for the folder reference ledger: persistence and degraded mode."""

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from sharebox.client.ledger import FolderLedger


@pytest.fixture
def ledger(tmp_path):
    return FolderLedger(profile_dir=str(tmp_path / "profile"))


class TestRegister:
    def test_register_and_has(self, ledger):
        assert ledger.has("folder_1000") is False
        assert ledger.register("folder_1000", "docs", "u1") is True
        assert ledger.has("folder_1000") is True

    def test_entry_fields(self, ledger):
        ledger.register("folder_1000", "docs", "u1")
        ref = ledger.get("folder_1000")
        assert ref.folder_name == "docs"
        assert ref.owner_id == "u1"
        assert ref.timestamp

    def test_register_upserts(self, ledger):
        ledger.register("folder_1000", "docs", "u1")
        ledger.register("folder_1000", "documents", "u1")
        assert len(ledger.entries()) == 1
        assert ledger.get("folder_1000").folder_name == "documents"


class TestPersistence:
    def test_survives_new_instance(self, tmp_path):
        profile = str(tmp_path / "profile")
        FolderLedger(profile_dir=profile).register("folder_1000", "docs", "u1")

        reloaded = FolderLedger(profile_dir=profile)
        assert reloaded.has("folder_1000") is True

    def test_file_format(self, tmp_path):
        profile = tmp_path / "profile"
        FolderLedger(profile_dir=str(profile)).register("folder_1000", "docs", "u1")
        data = json.loads((profile / FolderLedger.FILENAME).read_text())
        entry = data["folders"][0]
        assert set(entry) == {"id", "folder_name", "owner_id", "timestamp"}

    def test_corrupt_file_starts_empty(self, tmp_path):
        profile = tmp_path / "profile"
        profile.mkdir()
        (profile / FolderLedger.FILENAME).write_text("not json")

        ledger = FolderLedger(profile_dir=str(profile))
        assert ledger.has("folder_1000") is False
        assert ledger.register("folder_1000", "docs", "u1") is True

    def test_opens_lazily(self, tmp_path):
        profile = tmp_path / "profile"
        FolderLedger(profile_dir=str(profile))
        assert not profile.exists()


class TestUnavailable:
    @pytest.fixture
    def broken(self, tmp_path):
        # A regular file where the profile directory should be
        blocker = tmp_path / "profile"
        blocker.write_text("")
        return FolderLedger(profile_dir=str(blocker))

    def test_register_fails_softly(self, broken):
        assert broken.register("folder_1000", "docs", "u1") is False
        assert broken.available is False

    def test_queries_return_empty(self, broken):
        assert broken.has("folder_1000") is False
        assert broken.get("folder_1000") is None
        assert broken.entries() == []

    def test_stays_degraded(self, broken):
        broken.register("folder_1000", "docs", "u1")
        assert broken.register("folder_1001", "docs", "u1") is False


class TestWriteFailure:
    def test_unsaved_entry_is_not_remembered(self, ledger):
        assert ledger.register("folder_1", "docs", "u1") is True

        with patch.object(Path, "write_text", side_effect=OSError("disk full")):
            assert ledger.register("folder_2", "music", "u1") is False

        assert ledger.has("folder_2") is False
        assert ledger.has("folder_1") is True

    def test_failed_update_keeps_previous_entry(self, ledger):
        ledger.register("folder_1", "docs", "u1")
        before = ledger.get("folder_1")

        with patch.object(Path, "write_text", side_effect=OSError("disk full")):
            assert ledger.register("folder_1", "renamed", "u1") is False

        assert ledger.get("folder_1") == before
