"""Tests for repolens.analysis.cloning."""

import os
import subprocess
from pathlib import Path

import pytest

from repolens.analysis import cloning
from repolens.analysis.cloning import (
    GitSourceFetcher,
    cleanup_repository_safe,
    parse_github_url,
    sanitize_github_url,
    scratch_directory,
)
from repolens.analysis.errors import FetchFailure, InvalidRepositoryReference


class TestParseGithubUrl:
    @pytest.mark.parametrize(
        "reference",
        [
            "https://github.com/octo/hello-world",
            "http://github.com/octo/hello-world",
            "https://www.github.com/octo/hello-world",
            "github.com/octo/hello-world",
            "https://github.com/octo/hello-world.git",
            "https://github.com/octo/hello-world/tree/main/src",
            "  https://github.com/octo/hello-world/  ",
            "octo/hello-world",
        ],
    )
    def test_accepted_shapes(self, reference):
        repository = parse_github_url(reference)

        assert repository.owner == "octo"
        assert repository.name == "hello-world"
        assert repository.full_name == "octo/hello-world"
        assert repository.url == "https://github.com/octo/hello-world"

    def test_keeps_dots_in_repository_name(self):
        assert parse_github_url("https://github.com/vercel/next.js").name == "next.js"

    @pytest.mark.parametrize(
        "reference",
        [
            "https://gitlab.com/octo/hello-world",
            "https://github.com/octo",
            "not a url",
            "octo/hello/world",
            "https://github.com/octo/..",
            "ftp://github.com/octo/hello-world",
        ],
    )
    def test_rejected_shapes(self, reference):
        with pytest.raises(InvalidRepositoryReference):
            parse_github_url(reference)

    @pytest.mark.parametrize(
        "reference",
        [
            "https://github.com/ö/ü",
            "ö/ü",
            "octo/répo",
            "https://github.com/ｏｃｔｏ/demo",
            "octo/demo٣",
        ],
    )
    def test_rejects_non_ascii_names(self, reference):
        with pytest.raises(InvalidRepositoryReference):
            parse_github_url(reference)

    def test_empty_reference(self):
        with pytest.raises(InvalidRepositoryReference) as exc_info:
            parse_github_url("   ")
        assert exc_info.value.reason == "Repository URL is required"

    def test_sanitize_github_url(self):
        assert (
            sanitize_github_url("www.github.com/octo/hello-world.git")
            == "https://github.com/octo/hello-world"
        )


class TestGitSourceFetcher:
    def test_runs_shallow_clone(self, monkeypatch, tmp_path: Path):
        calls = []

        def fake_run(args, **kwargs):
            calls.append((args, kwargs))
            return subprocess.CompletedProcess(args, 0, "", "")

        monkeypatch.setattr(cloning.subprocess, "run", fake_run)
        fetcher = GitSourceFetcher(git_executable="/usr/bin/git", depth=3, timeout=12)

        fetcher.fetch("https://github.com/octo/hello-world.git", str(tmp_path))

        args, kwargs = calls[0]
        assert args == [
            "/usr/bin/git",
            "clone",
            "--depth",
            "3",
            "https://github.com/octo/hello-world.git",
            str(tmp_path),
        ]
        assert kwargs["check"] is True
        assert kwargs["timeout"] == 12
        assert kwargs["env"]["GIT_TERMINAL_PROMPT"] == "0"

    def test_clone_error_raises_fetch_failure(self, monkeypatch, tmp_path: Path):
        def fake_run(args, **kwargs):
            raise subprocess.CalledProcessError(128, args, stderr="fatal: repository not found\n")

        monkeypatch.setattr(cloning.subprocess, "run", fake_run)

        with pytest.raises(FetchFailure, match="repository not found"):
            GitSourceFetcher(git_executable="git").fetch("https://x", str(tmp_path))

    def test_timeout_raises_fetch_failure(self, monkeypatch, tmp_path: Path):
        def fake_run(args, **kwargs):
            raise subprocess.TimeoutExpired(args, kwargs["timeout"])

        monkeypatch.setattr(cloning.subprocess, "run", fake_run)

        with pytest.raises(FetchFailure, match="timed out after 5 seconds"):
            GitSourceFetcher(git_executable="git", timeout=5).fetch("https://x", str(tmp_path))

    def test_missing_executable_raises_fetch_failure(self, tmp_path: Path):
        fetcher = GitSourceFetcher(git_executable=str(tmp_path / "no-such-git"))

        with pytest.raises(FetchFailure, match="not found"):
            fetcher.fetch("https://x", str(tmp_path / "dest"))

    def test_no_git_on_path(self, monkeypatch, tmp_path: Path):
        monkeypatch.setattr(cloning.shutil, "which", lambda name: None)

        with pytest.raises(FetchFailure, match="Git executable not found"):
            GitSourceFetcher().fetch("https://x", str(tmp_path))


class TestScratchDirectory:
    def test_unique_directories(self):
        with scratch_directory() as first, scratch_directory() as second:
            assert first != second
            assert os.path.isdir(first)
            assert os.path.basename(first).startswith("repolens_")

    def test_removed_after_success(self):
        with scratch_directory(prefix="repolens_test_") as temp_dir:
            Path(temp_dir, "nested").mkdir()
            Path(temp_dir, "nested", "file.txt").write_text("x")

        assert not os.path.exists(temp_dir)

    def test_removed_after_error(self):
        with pytest.raises(RuntimeError):
            with scratch_directory() as temp_dir:
                Path(temp_dir, "file.txt").write_text("x")
                raise RuntimeError("boom")

        assert not os.path.exists(temp_dir)

    def test_tolerates_directory_removed_inside_block(self):
        with scratch_directory() as temp_dir:
            os.rmdir(temp_dir)

        assert not os.path.exists(temp_dir)


class TestCleanupRepositorySafe:
    def test_missing_path_is_not_an_error(self, tmp_path: Path):
        assert cleanup_repository_safe(str(tmp_path / "missing")) is True

    def test_removes_read_only_files(self, tmp_path: Path):
        target = tmp_path / "clone"
        (target / ".git" / "objects").mkdir(parents=True)
        pack = target / ".git" / "objects" / "pack"
        pack.write_text("x")
        pack.chmod(0o444)

        assert cleanup_repository_safe(str(target)) is True
        assert not target.exists()
