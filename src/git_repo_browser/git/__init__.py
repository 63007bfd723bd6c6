"""Git repository tools package."""

import logging
from typing import List, Optional

from git_repo_browser.config import BrowserConfig
from git_repo_browser.git import params
from git_repo_browser.git.branches import BranchTools
from git_repo_browser.git.cache import RepositoryCache
from git_repo_browser.git.commits import CommitTools
from git_repo_browser.git.maintenance import MaintenanceTools
from git_repo_browser.git.remotes import RemoteTools
from git_repo_browser.git.repository import RepositoryTools
from git_repo_browser.git.runner import GitRunner
from git_repo_browser.git.workspace import WorkspaceTools
from git_repo_browser.registry import ToolDefinition

logger = logging.getLogger(__name__)


def create_git_tools(
    config: BrowserConfig,
    runner: Optional[GitRunner] = None,
    cache: Optional[RepositoryCache] = None,
) -> List[ToolDefinition]:
    """
    Create the definitions of every git tool.

    All tool groups share one runner and one clone cache.

    Args:
        config: Browser configuration
        runner: git runner (created from config when omitted)
        cache: Clone cache (created from config when omitted)

    Returns:
        Tool definitions in the order they are listed to clients
    """
    runner = runner or GitRunner(config)
    cache = cache or RepositoryCache(config, runner)

    repository = RepositoryTools(config, runner, cache)
    commits = CommitTools(config, runner, cache)
    branches = BranchTools(config, runner, cache)
    remotes = RemoteTools(config, runner, cache)
    workspace = WorkspaceTools(config, runner, cache)
    maintenance = MaintenanceTools(config, runner, cache)

    return [
        # Remote repositories, served from the clone cache
        ToolDefinition(
            "git_directory_structure",
            "Clone a Git repository and return its directory structure in a tree format.",
            params.RepoUrlParams,
            repository.directory_structure,
        ),
        ToolDefinition(
            "git_read_files",
            "Read the contents of specified files in a given git repository.",
            params.ReadFilesParams,
            repository.read_files,
        ),
        ToolDefinition(
            "git_branch_diff",
            "Compare two branches and show files changed between them.",
            params.BranchDiffParams,
            branches.branch_diff,
        ),
        ToolDefinition(
            "git_commit_history",
            "Get commit history for a branch with optional filtering.",
            params.CommitHistoryParams,
            commits.commit_history,
        ),
        ToolDefinition(
            "git_commits_details",
            "Get detailed information about commits including full messages and diffs.",
            params.CommitsDetailsParams,
            commits.commits_details,
        ),
        ToolDefinition(
            "git_search_code",
            "Search for patterns in repository code.",
            params.SearchCodeParams,
            repository.search_code,
        ),
        # Local working copies
        ToolDefinition(
            "git_local_changes",
            "Get uncommitted changes in the working directory.",
            params.RepoPathParams,
            repository.local_changes,
        ),
        ToolDefinition(
            "git_commit",
            "Create a commit from the currently staged changes.",
            params.CommitParams,
            commits.commit,
        ),
        ToolDefinition(
            "git_track",
            "Stage files for the next commit.",
            params.TrackParams,
            commits.track,
        ),
        ToolDefinition(
            "git_checkout_branch",
            "Check out a branch, optionally creating it.",
            params.CheckoutBranchParams,
            branches.checkout_branch,
        ),
        ToolDefinition(
            "git_delete_branch",
            "Delete a local branch.",
            params.DeleteBranchParams,
            branches.delete_branch,
        ),
        ToolDefinition(
            "git_merge_branch",
            "Merge a branch into the current or a given target branch.",
            params.MergeBranchParams,
            branches.merge_branch,
        ),
        ToolDefinition(
            "git_push",
            "Push a local branch to a remote.",
            params.PushParams,
            remotes.push,
        ),
        ToolDefinition(
            "git_pull",
            "Pull changes from a remote branch.",
            params.PullParams,
            remotes.pull,
        ),
        ToolDefinition(
            "git_remote",
            "List, inspect, add, remove or modify remotes.",
            params.RemoteParams,
            remotes.remote,
        ),
        ToolDefinition(
            "git_stash",
            "Save, list, apply, pop or drop stashed changes.",
            params.StashParams,
            workspace.stash,
        ),
        ToolDefinition(
            "git_create_tag",
            "Create an annotated or lightweight tag.",
            params.CreateTagParams,
            workspace.create_tag,
        ),
        ToolDefinition(
            "git_rebase",
            "Rebase the current branch onto another branch or commit.",
            params.RebaseParams,
            branches.rebase,
        ),
        ToolDefinition(
            "git_reset",
            "Reset the current branch to a commit.",
            params.ResetParams,
            branches.reset,
        ),
        ToolDefinition(
            "git_config",
            "Set a git configuration value.",
            params.ConfigParams,
            workspace.set_config,
        ),
        ToolDefinition(
            "git_clean",
            "Remove untracked files from the working tree.",
            params.CleanParams,
            workspace.clean,
        ),
        ToolDefinition(
            "git_archive",
            "Create a zip or tar archive of a tree.",
            params.ArchiveParams,
            workspace.archive,
        ),
        ToolDefinition(
            "git_blame",
            "Show which commit and author last modified each line of a file.",
            params.BlameParams,
            commits.blame,
        ),
        ToolDefinition(
            "git_revert",
            "Revert an existing commit.",
            params.RevertParams,
            commits.revert,
        ),
        ToolDefinition(
            "git_hooks",
            "List, read or create repository hooks.",
            params.HooksParams,
            maintenance.hooks,
        ),
        ToolDefinition(
            "git_attributes",
            "Read or edit .gitattributes entries.",
            params.AttributesParams,
            maintenance.attributes,
        ),
        ToolDefinition(
            "git_lfs",
            "Install Git LFS or manage the patterns it tracks.",
            params.LfsParams,
            maintenance.lfs,
        ),
        ToolDefinition(
            "git_lfs_fetch",
            "Fetch Git LFS objects.",
            params.LfsFetchParams,
            maintenance.lfs_fetch,
        ),
    ]


__all__ = [
    "create_git_tools",
]
