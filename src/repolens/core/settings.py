"""
Analysis Settings

Runtime configuration shared by the analysis service, the web server and the CLI.
Defaults mirror the behaviour of the hosted analyzer; every field can be
overridden through a REPOLENS_* environment variable or explicitly by the caller.
"""

import os
import logging
from typing import FrozenSet, Literal, Optional, Mapping

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

DEFAULT_EXCLUSIONS: FrozenSet[str] = frozenset({"node_modules", ".git", ".next", "dist"})

EntryOrder = Literal["listing", "name"]
ErrorPolicy = Literal["raise", "skip"]


class AnalysisSettings(BaseModel):
    """
    Tunables for a single analysis run.

    Attributes:
        exclusions: Entry names that are never descended into or reported.
        order: "listing" keeps the order returned by the directory listing,
            "name" sorts directories first and then by name.
        on_error: "raise" fails the whole walk on an unreadable entry,
            "skip" leaves unreadable entries out of every view.
        clone_depth: History depth passed to ``git clone --depth``.
        clone_timeout: Seconds before a clone is abandoned.
        scratch_prefix: Prefix for the per-request temporary directory.
        github_api_base: Base URL of the GitHub REST API.
        github_timeout: Seconds before a GitHub API request is abandoned.
    """

    exclusions: FrozenSet[str] = DEFAULT_EXCLUSIONS
    order: EntryOrder = "listing"
    on_error: ErrorPolicy = "raise"
    clone_depth: int = Field(default=1, ge=1)
    clone_timeout: float = Field(default=300.0, gt=0)
    scratch_prefix: str = "repolens_"
    github_api_base: str = "https://api.github.com"
    github_timeout: float = Field(default=10.0, gt=0)

    @field_validator("exclusions", mode="before")
    @classmethod
    def split_exclusions(cls, v):
        if isinstance(v, str):
            return frozenset(name.strip() for name in v.split(",") if name.strip())
        return v

    @field_validator("github_api_base")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AnalysisSettings":
        """Build settings from REPOLENS_* environment variables, falling back to defaults."""
        environ = os.environ if environ is None else environ
        overrides = {}
        for field_name in cls.model_fields:
            key = f"REPOLENS_{field_name.upper()}"
            if key in environ:
                overrides[field_name] = environ[key]
        if overrides:
            logger.info(f"Settings overridden from environment: {sorted(overrides)}")
        return cls(**overrides)
