"""
Manifest Reader

Reads package.json from the root of a checked-out repository and extracts the
declared dependencies. Only the top-level ``dependencies`` and
``devDependencies`` mappings are interpreted.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from repolens.analysis.errors import ManifestError
from repolens.models.core import Dependency, ManifestSummary
from repolens.utils.paths import resolve_inside

logger = logging.getLogger(__name__)

MANIFEST_NAME = "package.json"


def read_package_json(repo_dir: Union[str, Path]) -> Optional[Dict[str, Any]]:
    """
    Parse package.json at the repository root.

    Returns:
        The parsed manifest, or None if the repository has no package.json.

    Raises:
        ManifestError: If package.json exists but is not a JSON object.
    """
    manifest_path = resolve_inside(repo_dir, MANIFEST_NAME)
    if manifest_path is None:
        logger.warning("package.json links outside the repository; treating it as absent.")
        return None
    if not manifest_path.is_file():
        logger.info("No package.json found in repository root.")
        return None

    try:
        manifest = json.loads(manifest_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ManifestError(f"Could not parse {manifest_path}: {e}") from e

    if not isinstance(manifest, dict):
        raise ManifestError(f"{manifest_path} does not contain a JSON object")

    logger.info(f"Found package.json at {manifest_path}")
    return manifest


def _format_dependencies(declared: Any) -> List[Dependency]:
    if not isinstance(declared, dict):
        return []
    return [Dependency(name=name, version=str(version)) for name, version in declared.items()]


def extract_dependencies(manifest: Optional[Dict[str, Any]]) -> ManifestSummary:
    """Turn the dependency mappings of a parsed manifest into ordered name/version lists."""
    if manifest is None:
        return ManifestSummary()
    return ManifestSummary(
        dependencies=_format_dependencies(manifest.get("dependencies")),
        dev_dependencies=_format_dependencies(manifest.get("devDependencies")),
    )


def read_manifest_summary(repo_dir: Union[str, Path]) -> ManifestSummary:
    return extract_dependencies(read_package_json(repo_dir))
