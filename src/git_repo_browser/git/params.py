"""Typed parameter models for every git tool.

Each tool accepts exactly one of these models. The MCP server validates raw
argument objects against them and publishes their JSON schema as the tool's
input schema.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator


class RepoUrlParams(BaseModel):
    repo_url: str = Field(description="The URL of the Git repository")


class RepoPathParams(BaseModel):
    repo_path: str = Field(description="The path to the local Git repository")


class ReadFilesParams(RepoUrlParams):
    file_paths: List[str] = Field(
        description="List of file paths to read (relative to repository root)"
    )


class SearchCodeParams(RepoUrlParams):
    pattern: str = Field(description="Search pattern (regex or string)")
    file_patterns: List[str] = Field(
        default_factory=list,
        description='Optional file patterns to filter (e.g., "*.js")',
    )
    case_sensitive: bool = Field(default=False, description="Whether the search is case sensitive")
    context_lines: int = Field(default=2, ge=0, description="Number of context lines to include")


class BranchDiffParams(RepoUrlParams):
    source_branch: str = Field(description="The source branch name")
    target_branch: str = Field(description="The target branch name")
    show_patch: bool = Field(default=False, description="Whether to include the actual diff patches")


class CommitHistoryParams(RepoUrlParams):
    branch: str = Field(default="main", description="The branch to get history from")
    max_count: int = Field(default=10, ge=1, description="Maximum number of commits to retrieve")
    author: Optional[str] = Field(default=None, description="Filter by author (optional)")
    since: Optional[str] = Field(
        default=None,
        description='Get commits after this date (e.g., "1 week ago", "2023-01-01")',
    )
    until: Optional[str] = Field(
        default=None,
        description='Get commits before this date (e.g., "yesterday", "2023-12-31")',
    )
    grep: Optional[str] = Field(
        default=None, description="Filter commits by message content (optional)"
    )


class CommitsDetailsParams(CommitHistoryParams):
    include_diff: bool = Field(default=False, description="Whether to include the commit diffs")


class CommitParams(RepoPathParams):
    message: str = Field(description="Commit message")


class TrackParams(RepoPathParams):
    files: List[str] = Field(
        default_factory=lambda: ["."],
        description='File paths to stage (use ["."] for all files)',
    )


class CheckoutBranchParams(RepoPathParams):
    branch_name: str = Field(description="Branch to check out (or create)")
    start_point: Optional[str] = Field(
        default=None, description="Starting point for a new branch (optional)"
    )
    create: bool = Field(default=False, description="Whether to create the branch")


class DeleteBranchParams(RepoPathParams):
    branch_name: str = Field(description="Branch to delete")
    force: bool = Field(default=False, description="Whether to force deletion of unmerged work")


class MergeBranchParams(RepoPathParams):
    source_branch: str = Field(description="Branch to merge from")
    target_branch: Optional[str] = Field(
        default=None, description="Branch to merge into (default: current branch)"
    )
    no_fast_forward: bool = Field(
        default=False,
        description="Create a merge commit even if a fast-forward is possible",
    )


class PushParams(RepoPathParams):
    remote: str = Field(default="origin", description="Remote name")
    branch: Optional[str] = Field(default=None, description="Branch to push (default: current)")
    force: bool = Field(default=False, description="Whether to force push")


class PullParams(RepoPathParams):
    remote: str = Field(default="origin", description="Remote name")
    branch: Optional[str] = Field(default=None, description="Branch to pull (default: current)")
    rebase: bool = Field(default=False, description="Rebase instead of merge")


class RemoteParams(RepoPathParams):
    action: Literal["list", "add", "remove", "set-url", "get-url", "rename", "prune", "show"] = Field(
        description="Remote action to perform"
    )
    name: str = Field(default="", description="Remote name")
    url: str = Field(default="", description="Remote URL (for add and set-url)")
    new_name: str = Field(default="", description="New remote name (for rename)")
    push_url: bool = Field(
        default=False,
        description="Operate on the push URL instead of the fetch URL (set-url, get-url)",
    )


class StashParams(RepoPathParams):
    action: Literal["save", "pop", "apply", "list", "drop"] = Field(
        default="save", description="Stash action to perform"
    )
    message: str = Field(default="", description="Stash message (for save)")
    index: int = Field(default=0, ge=0, description="Stash index (for pop, apply, drop)")


class CreateTagParams(RepoPathParams):
    tag_name: str = Field(description="Name of the tag")
    message: str = Field(default="", description="Tag message (for annotated tags)")
    annotated: bool = Field(default=True, description="Whether to create an annotated tag")


class RebaseParams(RepoPathParams):
    onto: str = Field(description="Branch or commit to rebase onto")
    interactive: bool = Field(default=False, description="Interactive rebase (not supported)")


class ResetParams(RepoPathParams):
    mode: Literal["soft", "mixed", "hard"] = Field(default="mixed", description="Reset mode")
    to: str = Field(default="HEAD", description="Commit or reference to reset to")


class ConfigParams(RepoPathParams):
    scope: Literal["local", "global", "system"] = Field(
        default="local", description="Configuration scope"
    )
    key: str = Field(description="Configuration key")
    value: str = Field(description="Configuration value")


class CleanParams(RepoPathParams):
    directories: bool = Field(default=False, description="Remove untracked directories too")
    force: bool = Field(default=False, description="Actually remove files")
    dry_run: bool = Field(default=True, description="Only report what would be removed")


class ArchiveParams(RepoPathParams):
    output_path: str = Field(description="Output path for the archive")
    format: Literal["zip", "tar"] = Field(default="zip", description="Archive format")
    prefix: str = Field(default="", description="Directory prefix for files in the archive")
    treeish: str = Field(default="HEAD", description="Tree-ish to archive")


class BlameParams(RepoPathParams):
    file_path: str = Field(description="Path to the file (relative to repository root)")
    rev: str = Field(default="HEAD", description="Revision to blame")


class RevertParams(RepoPathParams):
    commit: str = Field(min_length=1, description="Commit hash or reference to revert")
    no_commit: bool = Field(default=False, description="Stage the revert without committing")


class HooksParams(RepoPathParams):
    action: Literal["list", "get", "create"] = Field(description="Hook action to perform")
    hook_name: str = Field(default="", description='Hook name (e.g., "pre-commit")')
    script: str = Field(default="", description="Script content (for create)")


class AttributesParams(RepoPathParams):
    action: Literal["list", "get", "set"] = Field(description="Attributes action to perform")
    pattern: str = Field(default="", description="File pattern")
    attribute: str = Field(default="", description="Attribute to set")


class LfsParams(RepoPathParams):
    action: Literal["install", "track", "untrack", "list"] = Field(
        description="LFS action to perform"
    )
    patterns: List[str] = Field(
        default_factory=list, description="File patterns (for track and untrack)"
    )

    @field_validator("patterns", mode="before")
    @classmethod
    def _wrap_single_pattern(cls, value):
        if isinstance(value, str):
            return [value]
        return value


class LfsFetchParams(RepoPathParams):
    dry_run: bool = Field(default=False, description="Only report what would be fetched")
    pointers: bool = Field(default=False, description="Convert pointers to objects")
