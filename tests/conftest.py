"""Shared fixtures: small on-disk repositories for the walker and the service."""

import json
from pathlib import Path

import pytest


def populate_sample_repo(root: Path) -> Path:
    """
    Lay out a small JavaScript project:

        README.md, package.json, docs/, src/index.js, src/lib/util.js,
        plus excluded node_modules/ and .git/ directories.
    """
    (root / "README.md").write_text("hello", encoding="utf-8")
    (root / "package.json").write_text(
        json.dumps({"dependencies": {"a": "^1.0.0"}}), encoding="utf-8"
    )
    (root / "docs").mkdir()
    (root / "src" / "lib").mkdir(parents=True)
    (root / "src" / "index.js").write_text("console.log('hi')\n", encoding="utf-8")
    (root / "src" / "lib" / "util.js").write_text("module.exports = {}\n", encoding="utf-8")
    (root / "node_modules" / "left-pad").mkdir(parents=True)
    (root / "node_modules" / "left-pad" / "index.js").write_text("", encoding="utf-8")
    (root / "src" / "node_modules").mkdir()
    (root / "src" / "node_modules" / "dep.js").write_text("", encoding="utf-8")
    (root / ".git").mkdir()
    (root / ".git" / "HEAD").write_text("ref: refs/heads/main\n", encoding="utf-8")
    return root


@pytest.fixture
def sample_repo(tmp_path: Path) -> Path:
    repo = tmp_path / "repo"
    repo.mkdir()
    return populate_sample_repo(repo)
