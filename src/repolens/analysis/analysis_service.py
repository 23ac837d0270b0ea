"""
Analysis Service

Centralized service for repository analysis. Handles the orchestration of
reference validation, cloning into a scratch directory, the tree walk, manifest
and README lookup, and cleanup.
"""

import logging
from typing import Callable, Optional

from repolens.analysis.cloning import GitSourceFetcher, parse_github_url, scratch_directory
from repolens.analysis.manifest import extract_dependencies, read_package_json
from repolens.analysis.readme import read_readme
from repolens.analysis.tree_walker import RepoWalker
from repolens.core.settings import AnalysisSettings
from repolens.models.analysis import PACKAGE_JSON_NOT_FOUND, README_NOT_FOUND, RepoInfo

logger = logging.getLogger(__name__)


class AnalysisService:
    """
    Orchestrates a single repository analysis.

    The workflow is:
    1. Reference validation (no fetch for a malformed reference)
    2. Shallow clone into a fresh scratch directory
    3. One tree walk producing the node tree, text tree and Mermaid graph
    4. package.json and README.md lookup
    5. Scratch directory removal, on success and on failure

    The fetcher is built from ``fetcher_factory`` for every analysis, so
    concurrent analyses never share a client.
    """

    def __init__(
        self,
        settings: Optional[AnalysisSettings] = None,
        fetcher_factory: Optional[Callable[[AnalysisSettings], object]] = None,
    ):
        self.settings = settings or AnalysisSettings()
        self.fetcher_factory = fetcher_factory or self._default_fetcher

    @staticmethod
    def _default_fetcher(settings: AnalysisSettings) -> GitSourceFetcher:
        return GitSourceFetcher(depth=settings.clone_depth, timeout=settings.clone_timeout)

    def analyze_repository(self, reference: str) -> RepoInfo:
        """
        Clone and analyze a GitHub repository.

        Args:
            reference: GitHub repository URL or ``owner/repo``

        Returns:
            RepoInfo: README, manifest, dependencies and the three structure views

        Raises:
            InvalidRepositoryReference: If the reference is malformed
            AnalysisError: If cloning, walking or reading the manifest fails
        """
        repository = parse_github_url(reference)
        logger.info(f"Starting analysis of {repository.full_name}")

        with scratch_directory(self.settings.scratch_prefix) as temp_dir:
            try:
                fetcher = self.fetcher_factory(self.settings)
                logger.info(f"Cloning {repository.url}...")
                fetcher.fetch(f"{repository.url}.git", temp_dir)
                logger.info(f"Repository cloned to {temp_dir}")

                repo_info = self._analyze_directory(temp_dir)
            except Exception as e:
                logger.error(f"Analysis of {repository.full_name} failed: {e}", exc_info=True)
                raise

        logger.info(f"Analysis of {repository.full_name} completed")
        return repo_info

    def analyze_local(self, repo_dir: str) -> RepoInfo:
        """
        Analyze an already checked-out directory. Nothing is cloned or deleted.

        Raises:
            AnalysisError: If walking or reading the manifest fails
        """
        logger.info(f"Starting analysis of local directory {repo_dir}")
        try:
            return self._analyze_directory(repo_dir)
        except Exception as e:
            logger.error(f"Analysis of {repo_dir} failed: {e}", exc_info=True)
            raise

    def _analyze_directory(self, repo_dir: str) -> RepoInfo:
        walker = RepoWalker(
            exclusions=self.settings.exclusions,
            order=self.settings.order,
            on_error=self.settings.on_error,
        )
        structure = walker.walk(repo_dir)

        manifest = read_package_json(repo_dir)
        readme_content = read_readme(repo_dir)

        return RepoInfo(
            readme_content=readme_content if readme_content is not None else README_NOT_FOUND,
            package_json=manifest if manifest is not None else PACKAGE_JSON_NOT_FOUND,
            file_structure=structure.file_structure,
            directory_graph=structure.directory_graph,
            tree_structure=structure.tree_structure,
            important_libraries=extract_dependencies(manifest),
        )
