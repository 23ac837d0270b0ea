"""
RepoLens FastAPI Server

Web server providing REST API endpoints for repository analysis.
"""

import logging
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, ConfigDict, Field

from repolens.analysis.analysis_service import AnalysisService
from repolens.analysis.errors import InvalidRepositoryReference, UpstreamError
from repolens.analysis.github_metadata import DEFAULT_ERROR_MESSAGE, GitHubMetadataClient
from repolens.core.settings import AnalysisSettings

logger = logging.getLogger(__name__)

app = FastAPI(
    title="RepoLens API",
    description="Repository structure, README and dependency analysis",
    version="1.0.0",
)


class AnalyzeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    repo_url: Optional[str] = Field(default=None, alias="repoUrl")


class ArchitectureRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    repo_url: Optional[str] = Field(default=None, alias="repoURL")


def get_settings() -> AnalysisSettings:
    return AnalysisSettings.from_env()


@app.post("/analyze-repo")
async def analyze_repo(
    request: AnalyzeRequest, settings: AnalysisSettings = Depends(get_settings)
):
    """Clone a repository and return its README, manifest, dependencies and structure."""
    if not request.repo_url:
        raise HTTPException(status_code=400, detail="Repository URL is required")

    try:
        service = AnalysisService(settings)
        repo_info = await run_in_threadpool(service.analyze_repository, request.repo_url)
    except InvalidRepositoryReference as e:
        raise HTTPException(status_code=400, detail=e.reason)
    except Exception:
        # already logged with its traceback by AnalysisService
        raise HTTPException(status_code=500, detail="Error analyzing the repository")

    return {"success": True, "repoInfo": repo_info.to_response()}


@app.post("/generate-architecture")
async def generate_architecture(
    request: ArchitectureRequest, settings: AnalysisSettings = Depends(get_settings)
):
    """Return GitHub metadata (stars, forks, license, ...) for a repository."""
    if not request.repo_url:
        raise HTTPException(status_code=400, detail="Invalid repo URL")

    client = GitHubMetadataClient(
        api_base=settings.github_api_base, timeout=settings.github_timeout
    )
    try:
        metadata = await run_in_threadpool(client.fetch_metadata, request.repo_url)
    except InvalidRepositoryReference:
        raise HTTPException(status_code=400, detail="Invalid repo URL")
    except UpstreamError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception:
        logger.exception(f"Unexpected error fetching metadata for {request.repo_url}")
        raise HTTPException(status_code=500, detail=DEFAULT_ERROR_MESSAGE)

    return metadata.model_dump(by_alias=True)


@app.get("/")
async def root():
    return {"message": "RepoLens API is running"}


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
