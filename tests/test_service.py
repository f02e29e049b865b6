"""Tests for the alignment service and project version selection."""

from unittest.mock import MagicMock

import pytest

from alignment.service import AlignmentService, Request, Response, next_incremental_version
from versioning.models import AlignmentValue, Coordinate


class TestNextIncrementalVersion:
    """Choosing the suffixed project version."""

    @pytest.mark.parametrize("version,existing,expected", [
        ("1.0.0", [], "1.0.0.redhat-00001"),
        ("1.0", [], "1.0.0.redhat-00001"),
        ("1.0.0", ["1.0.0.redhat-00001", "1.0.0.redhat-00004"], "1.0.0.redhat-00005"),
        ("1.0.0.redhat-00002", ["1.0.0.redhat-00002"], "1.0.0.redhat-00003"),
        ("2.0-SNAPSHOT", [], "2.0-SNAPSHOT-redhat-00001"),
        ("3.1.Final", ["3.1.Final-redhat-00007"], "3.1.Final-redhat-00008"),
    ])
    def test_versions(self, version, existing, expected):
        assert next_incremental_version(version, "redhat", existing) == expected

    def test_suffixed_version_never_moves_backwards(self):
        """The build number already carried by the version is a lower bound."""
        assert next_incremental_version("1.0.0.redhat-00002", "redhat", []) == "1.0.0.redhat-00003"
        assert next_incremental_version("1.0.0.redhat-00005", "redhat", ["1.0.0.redhat-00003"]) == "1.0.0.redhat-00006"
        assert next_incremental_version("2.0-SNAPSHOT-redhat-00004", "redhat", []) == "2.0-SNAPSHOT-redhat-00005"

    def test_other_base_versions_ignored(self):
        assert next_incremental_version("1.0.0", "redhat", ["1.0.1.redhat-00009"]) == "1.0.0.redhat-00001"


class TestResponse:
    """Lookups on a translated response."""

    def test_lookups(self):
        coord = Coordinate("org.acme", "lib", "1.0")
        response = Response({coord: AlignmentValue("1.0-redhat-00001", ["1.0-redhat-00001"])}, "1.0.0.redhat-00001")
        assert response.aligned_version_of(coord) == "1.0-redhat-00001"
        assert response.available_versions_of(coord) == ["1.0-redhat-00001"]
        assert response.aligned_version_of(Coordinate("org.acme", "other", "1.0")) is None
        assert response.available_versions_of(Coordinate("org.acme", "other", "1.0")) == []
        assert len(response) == 1


class TestAlignmentService:
    """Request translation."""

    def test_align_translates_everything_once(self):
        root = Coordinate("org.acme", "root", "1.0.0")
        dep = Coordinate("org.apache.commons", "commons-lang3", "3.8")
        client = MagicMock()
        client.translate_versions.return_value = {
            root: AlignmentValue("1.0.0.redhat-00002", ["1.0.0.redhat-00001"]),
            dep: AlignmentValue("3.8-redhat-00001", []),
        }
        service = AlignmentService(client, "redhat")

        response = service.align(Request(root=root, project_gavs=[root], dependencies=[dep]))

        client.translate_versions.assert_called_once()
        assert set(client.translate_versions.call_args[0][0]) == {root, dep}
        assert response.new_project_version == "1.0.0.redhat-00003"
        assert response.aligned_version_of(dep) == "3.8-redhat-00001"

    def test_without_root_no_new_version(self):
        client = MagicMock()
        client.translate_versions.return_value = {}
        response = AlignmentService(client, "redhat").align(Request(root=None))
        assert response.new_project_version is None
