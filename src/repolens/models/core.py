from pydantic import BaseModel, ConfigDict, Field, model_serializer
from typing import List, Literal, Optional

EntryType = Literal["file", "directory"]


class FileSystemEntry(BaseModel):
    """A file or directory found while walking a repository"""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    type: EntryType
    path: str
    relative_path: str = Field(alias="relativePath")
    children: Optional[List["FileSystemEntry"]] = None

    @model_serializer(mode="wrap")
    def _omit_file_children(self, handler):
        data = handler(self)
        if self.children is None:
            data.pop("children", None)
        return data

    @property
    def is_directory(self) -> bool:
        return self.type == "directory"

    def count_nodes(self) -> int:
        """Number of entries in this subtree, including this one"""
        return 1 + sum(child.count_nodes() for child in self.children or [])


class Dependency(BaseModel):
    """A single declared package dependency"""

    name: str
    version: str


class ManifestSummary(BaseModel):
    """Dependencies declared in package.json"""

    model_config = ConfigDict(populate_by_name=True)

    dependencies: List[Dependency] = []
    dev_dependencies: List[Dependency] = Field(default=[], alias="devDependencies")


class Repository(BaseModel):
    """Basic repository information"""

    url: str
    owner: str
    name: str
    full_name: str


class RepositoryMetadata(BaseModel):
    """Repository details reported by the GitHub API"""

    model_config = ConfigDict(populate_by_name=True)

    repo_name: str = Field(alias="repoName")
    owner: str
    description: Optional[str] = None
    stars: int = 0
    forks: int = 0
    language: Optional[str] = None
    license: str = "No License"
    created_at: Optional[str] = Field(default=None, alias="createdAt")
    updated_at: Optional[str] = Field(default=None, alias="updatedAt")
    open_issues_count: int = Field(default=0, alias="openIssuesCount")
    watchers_count: int = Field(default=0, alias="watchersCount")
