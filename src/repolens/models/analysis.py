from pydantic import BaseModel, ConfigDict, Field
from typing import List, Dict, Any, Union

from .core import FileSystemEntry, ManifestSummary

README_NOT_FOUND = "README.md not found"
PACKAGE_JSON_NOT_FOUND = "package.json not found"

GRAPH_HEADER = "graph TD"


class GraphDescription(BaseModel):
    """Mermaid declarations and containment edges for a directory hierarchy"""

    # declarations and edges interleaved in emission order
    lines: List[str] = []
    declarations: List[str] = []
    edges: List[str] = []
    node_paths: Dict[str, str] = {}

    def render(self) -> str:
        """Header line followed by one indented declaration or edge per line"""
        return "\n".join([GRAPH_HEADER] + [f"  {line}" for line in self.lines])


class RepositoryStructure(BaseModel):
    """The three views derived from a single walk of a repository"""

    file_structure: List[FileSystemEntry]
    graph: GraphDescription
    tree_structure: str
    total_files: int = 0
    total_directories: int = 0

    @property
    def directory_graph(self) -> str:
        return self.graph.render()


class RepoInfo(BaseModel):
    """Result of analyzing a repository"""

    model_config = ConfigDict(populate_by_name=True)

    readme_content: str = Field(alias="readmeContent")
    package_json: Union[Dict[str, Any], str] = Field(alias="packageJson")
    file_structure: List[FileSystemEntry] = Field(alias="fileStructure")
    directory_graph: str = Field(alias="directoryGraph")
    tree_structure: str = Field(alias="treeStructure")
    important_libraries: ManifestSummary = Field(alias="importantLibraries")

    def to_response(self) -> Dict[str, Any]:
        """JSON-ready payload using the public camelCase field names"""
        return self.model_dump(by_alias=True)
