"""Tests for the manipulation model tree and its persisted file."""

import json

import pytest

from alignment.io import manipulation_file_path, read_manipulation_model, write_manipulation_model
from alignment.model import ManipulationModel
from common.errors import InvalidArgumentError, ManipulationFileError, ModelLookupError
from versioning.models import Coordinate


def _tree():
    root = ManipulationModel("root", "bar")
    child1 = root.add_child(ManipulationModel("child1", "bar"))
    root.add_child(ManipulationModel("child2", "bar"))
    child11 = child1.add_child(ManipulationModel("child11", "bar"))
    child111 = child11.add_child(ManipulationModel("child111", "bar"))
    return root, child1, child11, child111


class TestFindCorrespondingChildWithName:
    """Bare-name lookups."""

    def test_self_and_direct_child(self):
        root, child1, _, _ = _tree()
        assert root.find_corresponding_child("root") is root
        assert root.find_corresponding_child("child1") is child1

    def test_descendant(self):
        root, _, child11, child111 = _tree()
        assert root.find_corresponding_child("child11") is child11
        assert root.find_corresponding_child("child111") is child111

    def test_missing_name(self):
        root, _, _, _ = _tree()
        with pytest.raises(ModelLookupError, match="ManipulationModel child3 does not exist"):
            root.find_corresponding_child("child3")

    def test_empty_name(self):
        root, _, _, _ = _tree()
        with pytest.raises(InvalidArgumentError, match="Supplied child name cannot be empty"):
            root.find_corresponding_child("")

    def test_lookup_from_child(self):
        _, child1, child11, _ = _tree()
        assert child1.find_corresponding_child("child11") is child11


class TestFindCorrespondingChildWithPath:
    """Colon path lookups."""

    def test_colon_is_self(self):
        root, _, _, _ = _tree()
        assert root.find_corresponding_child(":") is root

    def test_absolute_path(self):
        root, child1, child11, child111 = _tree()
        assert root.find_corresponding_child(":child1") is child1
        assert root.find_corresponding_child(":child1:child11:child111") is child111

    def test_path_segments_match_exactly(self):
        root, _, _, _ = _tree()
        with pytest.raises(ModelLookupError, match="ManipulationModel child11 does not exist"):
            root.find_corresponding_child(":child11")

    def test_path_from_child_includes_own_segment(self):
        _, child1, child11, child111 = _tree()
        assert child1.find_corresponding_child(":child1:child11") is child11
        assert child1.find_corresponding_child(":child1:child11:child111") is child111


class TestTreeStructure:
    """Ownership and back references."""

    def test_paths(self):
        root, child1, child11, child111 = _tree()
        assert root.path == ":"
        assert child1.path == ":child1"
        assert child111.path == ":child1:child11:child111"
        assert child11.parent_path == ":child1"

    def test_subtree_reparented_when_attached(self):
        sub = ManipulationModel("a", "g")
        sub.add_child(ManipulationModel("b", "g"))
        root = ManipulationModel("root", "g")
        root.add_child(sub)
        assert root.find_corresponding_child(":a:b").path == ":a:b"

    def test_sibling_names_unique(self):
        root = ManipulationModel("root", "g")
        root.add_child(ManipulationModel("dup", "g"))
        with pytest.raises(InvalidArgumentError):
            root.add_child(ManipulationModel("dup", "g"))

    def test_get_all_aligned_dependencies(self):
        root, child1, child11, _ = _tree()
        root.aligned_dependencies["org.jboss.resteasy:resteasy-jaxrs:3.6.3.Final"] = Coordinate(
            "org.jboss.resteasy", "resteasy-jaxrs", "3.6.3.Final-redhat-000001")
        child1.aligned_dependencies["org.hibernate:hibernate-core:5.3.7.Final"] = Coordinate(
            "org.hibernate", "hibernate-core", "5.3.7.Final-redhat-000001")
        child11.aligned_dependencies["io.undertow:undertow-core:2.0.15.Final"] = Coordinate(
            "io.undertow", "undertow-core", "2.0.15.Final-redhat-000001")

        merged = root.get_all_aligned_dependencies()

        assert set(merged) == {
            "org.jboss.resteasy:resteasy-jaxrs:3.6.3.Final",
            "org.hibernate:hibernate-core:5.3.7.Final",
            "io.undertow:undertow-core:2.0.15.Final",
        }


class TestManipulationFile:
    """Reading and writing manipulation.json."""

    def test_write_then_read(self, tmp_path):
        root, child1, _, _ = _tree()
        root.version = "1.0.0.redhat-00001"
        child1.aligned_dependencies["org.apache.commons:commons-lang3:latest.release"] = Coordinate(
            "org.apache.commons", "commons-lang3", "3.8-redhat-00001")
        child1.available_unaligned_dependencies["org.acme:lib:1.0"] = ["1.0-redhat-00002", "1.0-redhat-00001"]

        write_manipulation_model(tmp_path, root)
        loaded = read_manipulation_model(tmp_path)

        assert loaded.version == "1.0.0.redhat-00001"
        node = loaded.find_corresponding_child(":child1")
        assert node.aligned_dependencies == child1.aligned_dependencies
        assert node.available_unaligned_dependencies["org.acme:lib:1.0"] == ["1.0-redhat-00002", "1.0-redhat-00001"]
        assert loaded.find_corresponding_child(":child1:child11:child111").name == "child111"

    def test_persisted_shape(self, tmp_path):
        root = ManipulationModel("root", "org.acme", "1.0")
        root.aligned_dependencies["g:a:1"] = Coordinate("g", "a", "1-redhat-00001")
        write_manipulation_model(tmp_path, root)

        data = json.loads(manipulation_file_path(tmp_path).read_text(encoding="utf-8"))

        assert data == {
            "group": "org.acme",
            "name": "root",
            "version": "1.0",
            "alignedDependencies": {"g:a:1": {"groupId": "g", "artifactId": "a", "version": "1-redhat-00001"}},
            "availableUnalignedDependencies": {},
            "children": [],
        }

    def test_missing_file(self, tmp_path):
        with pytest.raises(ManipulationFileError):
            read_manipulation_model(tmp_path)

    def test_invalid_file(self, tmp_path):
        manipulation_file_path(tmp_path).write_text(
            json.dumps({"name": "root", "alignedDependencies": {"g:a:1": {"groupId": "g"}}}),
            encoding="utf-8",
        )
        with pytest.raises(ManipulationFileError, match="alignedDependencies"):
            read_manipulation_model(tmp_path)

    def test_not_json(self, tmp_path):
        manipulation_file_path(tmp_path).write_text("{not json", encoding="utf-8")
        with pytest.raises(ManipulationFileError):
            read_manipulation_model(tmp_path)
