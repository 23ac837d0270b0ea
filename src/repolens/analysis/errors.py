"""
RepoLens Errors

Exception taxonomy shared by the analysis pipeline. Client-facing problems
(a malformed repository reference) derive from ValueError; everything that
goes wrong after the reference was accepted derives from AnalysisError and is
surfaced as a server error.
"""

from typing import Optional


class InvalidRepositoryReference(ValueError):
    """The supplied repository reference does not look like a GitHub repository."""

    def __init__(self, reference: str, reason: str = "Invalid GitHub URL"):
        self.reference = reference
        self.reason = reason
        super().__init__(f"{reason}: {reference!r}")


class AnalysisError(RuntimeError):
    """Base class for failures that happen while analyzing an accepted reference."""


class FetchFailure(AnalysisError):
    """The repository contents could not be retrieved."""


class WalkFailure(AnalysisError):
    """A filesystem read failed while walking the repository tree."""

    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(f"Failed to read {path}: {message}")


class ManifestError(AnalysisError):
    """package.json exists but cannot be parsed."""


class UpstreamError(AnalysisError):
    """The GitHub API answered with an error or could not be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code if status_code is not None else 502
        super().__init__(message)
