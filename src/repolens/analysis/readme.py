"""README lookup for the repository root."""

import logging
from pathlib import Path
from typing import Optional, Union

from repolens.analysis.errors import AnalysisError
from repolens.utils.paths import resolve_inside

logger = logging.getLogger(__name__)

README_NAME = "README.md"


def read_readme(repo_dir: Union[str, Path]) -> Optional[str]:
    """Return the text of README.md at the repository root, or None if there is none."""
    readme_path = resolve_inside(repo_dir, README_NAME)
    if readme_path is None:
        logger.warning("README.md links outside the repository; treating it as absent.")
        return None
    if not readme_path.is_file():
        logger.info("No README file found in repository root.")
        return None

    logger.info(f"Found README file at {readme_path}")
    try:
        return readme_path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise AnalysisError(f"Could not read README file at {readme_path}: {e}") from e
