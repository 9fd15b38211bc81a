"""
Tests for the mirror store, models and run reports.
"""

import json

import pytest

from appmirror.errors import LocalReadError, MirrorRootMissing
from appmirror.mirror.models import (
    OPTIONAL_ARTIFACTS,
    REQUIRED_ARTIFACTS,
    AppConfigDocument,
    AppIdentifier,
    ArtifactKind,
    ArtifactSet,
)
from appmirror.mirror.state import STATUS_FAILED, STATUS_FETCHED, RunReport
from appmirror.mirror.store import MirrorStore

from conftest import config_json, write_entry


class TestMirrorStore:
    """Tests for MirrorStore."""

    def test_write_is_atomic_and_counted(self, mirror_root):
        store = MirrorStore(mirror_root)
        store.ensure_entry("immich")
        writes_after_dirs = store.writes

        path = store.write_artifact("immich", ArtifactKind.CONFIG, b"{}")

        assert path.read_bytes() == b"{}"
        assert store.writes == writes_after_dirs + 1
        assert not list(path.parent.glob(".*.tmp"))

    def test_ensure_entry_creates_metadata(self, mirror_root):
        store = MirrorStore(mirror_root)
        store.ensure_entry("immich")

        assert (mirror_root / "immich" / "metadata").is_dir()
        assert store.writes == 2

        store.ensure_entry("immich")
        assert store.writes == 2

    def test_failed_write_leaves_original(self, mirror_root, monkeypatch):
        write_entry(mirror_root, "immich", config=b'{"version": "1"}')
        store = MirrorStore(mirror_root)

        def boom(self, target):
            raise OSError("disk full")

        monkeypatch.setattr("pathlib.Path.replace", boom)
        with pytest.raises(OSError):
            store.write_artifact("immich", ArtifactKind.CONFIG, b'{"version": "2"}')

        assert (mirror_root / "immich" / "config.json").read_bytes() == b'{"version": "1"}'
        assert not (mirror_root / "immich" / ".config.json.tmp").exists()

    def test_entry_names_sorted_dirs_only(self, mirror_root):
        for name in ("zipline", "crafty", "immich"):
            (mirror_root / name).mkdir()
        (mirror_root / "notes.txt").write_text("x")

        assert MirrorStore(mirror_root).entry_names() == ["crafty", "immich", "zipline"]

    def test_missing_root(self, tmp_path):
        with pytest.raises(MirrorRootMissing):
            MirrorStore(tmp_path / "nope").entry_names()

    def test_load_config(self, mirror_root):
        write_entry(mirror_root, "immich", config=config_json("1.2.0", port=8080))
        config = MirrorStore(mirror_root).load_config("immich")

        assert config.version == "1.2.0"
        assert config.model_extra["port"] == 8080

    @pytest.mark.parametrize("content", [b"{bad", b"[1, 2]"])
    def test_load_config_errors(self, mirror_root, content):
        write_entry(mirror_root, "immich", config=content)
        with pytest.raises(LocalReadError) as exc_info:
            MirrorStore(mirror_root).load_config("immich")
        assert exc_info.value.app == "immich"


class TestModels:
    """Tests for mirror models."""

    def test_identifier_for_import_uses_resolved_name(self):
        identifier = AppIdentifier.for_import("Stirling PDF", "stirling-pdf")
        assert identifier.local_directory_name == "stirling-pdf"
        assert identifier.requested_name == "Stirling PDF"

    def test_artifact_set(self):
        artifacts = ArtifactSet()
        assert artifacts.present() == {}

        artifacts.put(ArtifactKind.LOGO, b"img")
        artifacts.put(ArtifactKind.CONFIG, b"{}")

        assert artifacts.get(ArtifactKind.CONFIG) == b"{}"
        assert list(artifacts.present()) == [ArtifactKind.CONFIG, ArtifactKind.LOGO]

    def test_artifact_kinds(self):
        assert REQUIRED_ARTIFACTS == (ArtifactKind.CONFIG, ArtifactKind.COMPOSE)
        assert OPTIONAL_ARTIFACTS == (ArtifactKind.DESCRIPTION, ArtifactKind.LOGO)
        assert ArtifactKind.DESCRIPTION.label == "description.md"

    @pytest.mark.parametrize("value,expected", [(None, "0.0.0"), ("", "0.0.0"), (2, "2"), ("v1", "v1")])
    def test_config_version_coercion(self, value, expected):
        assert AppConfigDocument(version=value).version == expected

    def test_config_version_absent(self):
        assert AppConfigDocument.model_validate({"name": "x"}).version == "0.0.0"


class TestRunReport:
    """Tests for RunReport."""

    def test_counts_and_problems(self):
        report = RunReport(mode="import", root="apps")
        report.record("immich", STATUS_FETCHED, upstream="immich")
        report.record("broken", STATUS_FAILED, detail="HTTP 500")
        report.finish()

        assert report.counts() == {STATUS_FETCHED: 1, STATUS_FAILED: 1}
        assert [o.app for o in report.problems] == ["broken"]
        assert report.finished_at is not None

    def test_save(self, tmp_path):
        report = RunReport(mode="update", root="apps")
        report.record("immich", STATUS_FETCHED)
        path = tmp_path / "reports" / "run.json"

        report.save(path)

        data = json.loads(path.read_text())
        assert data["outcomes"][0]["app"] == "immich"
        assert not path.with_suffix(".tmp").exists()
