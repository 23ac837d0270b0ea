"""Tests for repolens.analysis.manifest and repolens.analysis.readme."""

import json
from pathlib import Path

import pytest

from repolens.analysis.errors import ManifestError
from repolens.analysis.manifest import (
    extract_dependencies,
    read_manifest_summary,
    read_package_json,
)
from repolens.analysis.readme import read_readme


def _write_manifest(root: Path, manifest) -> None:
    (root / "package.json").write_text(json.dumps(manifest), encoding="utf-8")


class TestReadManifestSummary:
    def test_dependencies_without_dev_dependencies(self, tmp_path: Path):
        _write_manifest(tmp_path, {"dependencies": {"x": "1.0.0"}})

        summary = read_manifest_summary(tmp_path)

        assert [dep.model_dump() for dep in summary.dependencies] == [
            {"name": "x", "version": "1.0.0"}
        ]
        assert summary.dev_dependencies == []

    def test_no_manifest(self, tmp_path: Path):
        summary = read_manifest_summary(tmp_path)

        assert summary.dependencies == []
        assert summary.dev_dependencies == []

    def test_preserves_declaration_order(self, tmp_path: Path):
        _write_manifest(
            tmp_path,
            {
                "dependencies": {"zod": "^3.0.0", "axios": "^1.6.0", "next": "14.0.0"},
                "devDependencies": {"typescript": "^5", "eslint": "^8"},
            },
        )

        summary = read_manifest_summary(tmp_path)

        assert [dep.name for dep in summary.dependencies] == ["zod", "axios", "next"]
        assert [(dep.name, dep.version) for dep in summary.dev_dependencies] == [
            ("typescript", "^5"),
            ("eslint", "^8"),
        ]

    def test_dev_dependencies_serialize_with_camel_case(self, tmp_path: Path):
        _write_manifest(tmp_path, {"devDependencies": {"jest": "29.0.0"}})

        dumped = read_manifest_summary(tmp_path).model_dump(by_alias=True)

        assert dumped == {
            "dependencies": [],
            "devDependencies": [{"name": "jest", "version": "29.0.0"}],
        }


class TestExtractDependencies:
    def test_none_manifest(self):
        summary = extract_dependencies(None)
        assert summary.dependencies == []
        assert summary.dev_dependencies == []

    def test_non_mapping_fields_are_treated_as_absent(self):
        summary = extract_dependencies({"dependencies": ["a", "b"], "devDependencies": None})
        assert summary.dependencies == []
        assert summary.dev_dependencies == []


class TestReadPackageJson:
    def test_returns_parsed_manifest(self, tmp_path: Path):
        _write_manifest(tmp_path, {"name": "demo", "version": "0.1.0"})
        assert read_package_json(tmp_path) == {"name": "demo", "version": "0.1.0"}

    def test_missing_manifest_is_none(self, tmp_path: Path):
        assert read_package_json(tmp_path) is None

    def test_invalid_json_raises(self, tmp_path: Path):
        (tmp_path / "package.json").write_text("{not json", encoding="utf-8")

        with pytest.raises(ManifestError):
            read_package_json(tmp_path)

    def test_non_object_manifest_raises(self, tmp_path: Path):
        _write_manifest(tmp_path, ["not", "an", "object"])

        with pytest.raises(ManifestError):
            read_package_json(tmp_path)


class TestReadReadme:
    def test_reads_readme(self, tmp_path: Path):
        (tmp_path / "README.md").write_text("# Title\n\nhello", encoding="utf-8")
        assert read_readme(tmp_path) == "# Title\n\nhello"

    def test_missing_readme_is_none(self, tmp_path: Path):
        assert read_readme(tmp_path) is None

    def test_readme_directory_is_not_a_readme(self, tmp_path: Path):
        (tmp_path / "README.md").mkdir()
        assert read_readme(tmp_path) is None

    def test_readme_linking_outside_the_repository_is_absent(self, tmp_path: Path):
        (tmp_path / "host.txt").write_text("host secrets", encoding="utf-8")
        repo = tmp_path / "repo"
        repo.mkdir()
        (repo / "README.md").symlink_to(tmp_path / "host.txt")

        assert read_readme(repo) is None

    def test_readme_linking_inside_the_repository_is_read(self, tmp_path: Path):
        (tmp_path / "docs").mkdir()
        (tmp_path / "docs" / "intro.md").write_text("intro", encoding="utf-8")
        (tmp_path / "README.md").symlink_to(tmp_path / "docs" / "intro.md")

        assert read_readme(tmp_path) == "intro"


class TestManifestContainment:
    def test_manifest_linking_outside_the_repository_is_absent(self, tmp_path: Path):
        _write_manifest(tmp_path, {"dependencies": {"host": "1.0.0"}})
        repo = tmp_path / "repo"
        repo.mkdir()
        (repo / "package.json").symlink_to(tmp_path / "package.json")

        assert read_package_json(repo) is None
        assert read_manifest_summary(repo).dependencies == []
