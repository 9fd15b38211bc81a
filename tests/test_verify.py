"""
Tests for mirror verification and status listing.
"""

import pytest

from appmirror.errors import MirrorRootMissing
from appmirror.mirror.verify import ValidationFailure, check_all, list_entries

from conftest import config_json, write_entry


class TestCheckAll:
    """Tests for check_all."""

    def test_valid_mirror_passes(self, mirror_root):
        write_entry(mirror_root, "immich", config=config_json())
        write_entry(mirror_root, "glances", config=config_json())

        result = check_all(mirror_root)

        assert result.passed is True
        assert result.checked == 2
        assert result.failures == []

    def test_missing_compose_reported_once(self, mirror_root):
        write_entry(mirror_root, "immich", config=config_json())
        write_entry(mirror_root, "glances", config=config_json(), compose=None)

        result = check_all(mirror_root)

        assert result.passed is False
        assert result.failures == [
            ValidationFailure(app="glances", file="docker-compose.json", reason="missing")
        ]

    def test_repeatable(self, mirror_root):
        write_entry(mirror_root, "glances", config=config_json(), compose=None)
        write_entry(mirror_root, "zipline", config=b"{oops")

        first = check_all(mirror_root)
        second = check_all(mirror_root)

        assert first.failures == second.failures
        assert len(first.failures) == 2

    def test_malformed_json(self, mirror_root):
        write_entry(mirror_root, "zipline", config=b"{oops", compose=b"[1, 2,")

        result = check_all(mirror_root)

        assert [(f.app, f.file) for f in result.failures] == [
            ("zipline", "config.json"),
            ("zipline", "docker-compose.json"),
        ]
        assert all("Invalid JSON" in f.reason for f in result.failures)

    def test_both_missing(self, mirror_root):
        write_entry(mirror_root, "empty", compose=None)

        result = check_all(mirror_root)

        assert {f.file for f in result.failures} == {"config.json", "docker-compose.json"}

    def test_does_not_write(self, mirror_root):
        write_entry(mirror_root, "immich", config=config_json(), compose=None)
        before = sorted(p.relative_to(mirror_root) for p in mirror_root.rglob("*"))

        check_all(mirror_root)

        assert sorted(p.relative_to(mirror_root) for p in mirror_root.rglob("*")) == before

    def test_empty_root_passes(self, mirror_root):
        assert check_all(mirror_root).passed is True

    def test_missing_root_raises(self, tmp_path):
        with pytest.raises(MirrorRootMissing):
            check_all(tmp_path / "nope")

    def test_to_dict(self, mirror_root):
        write_entry(mirror_root, "glances", config=config_json(), compose=None)
        data = check_all(mirror_root).to_dict()

        assert data["passed"] is False
        assert data["failures"][0]["app"] == "glances"


class TestListEntries:
    """Tests for list_entries."""

    def test_versions_and_artifacts(self, mirror_root):
        write_entry(mirror_root, "immich", config=config_json("1.2.0"), logo=b"x")
        write_entry(mirror_root, "broken", config=b"nope")

        entries = {e.app: e for e in list_entries(mirror_root)}

        assert entries["immich"].version == "1.2.0"
        assert entries["immich"].artifacts == [
            "config.json",
            "docker-compose.json",
            "metadata/logo.jpg",
        ]
        assert entries["broken"].version is None
        assert entries["broken"].error
