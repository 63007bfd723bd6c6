"""Branch comparison and history-rewriting tools."""

import logging

from git_repo_browser.git.base import GitToolsBase, reject_option, tool_errors
from git_repo_browser.git.params import (
    BranchDiffParams,
    CheckoutBranchParams,
    DeleteBranchParams,
    MergeBranchParams,
    RebaseParams,
    ResetParams,
)
from git_repo_browser.git.runner import GitCommandError
from git_repo_browser.results import ToolResponse

logger = logging.getLogger(__name__)


class BranchTools(GitToolsBase):
    """Tools comparing, switching, merging and rewinding branches."""

    @tool_errors("get branch diff")
    def branch_diff(self, params: BranchDiffParams) -> ToolResponse:
        """Compare two branches of a cached clone."""
        acquisition = self.cache.acquire(params.repo_url)
        if not acquisition.ok:
            return ToolResponse.failure(f"Failed to get branch diff: {acquisition.error}")

        repo_path = acquisition.path
        source = self._resolve_branch(repo_path, params.source_branch)
        target = self._resolve_branch(repo_path, params.target_branch)
        commit_range = f"{target}...{source}"

        diff = self._git(repo_path, "diff", "--name-status", commit_range, "--")
        # --name-status suppresses patch output, so patches are a second diff
        if params.show_patch:
            diff += "\n" + self._git(repo_path, "diff", "--patch", commit_range, "--")

        count = self._git(repo_path, "rev-list", "--count", commit_range, "--").strip()

        return ToolResponse.success({
            "commits_count": int(count or 0),
            "diff_summary": diff,
        })

    @tool_errors("checkout branch")
    def checkout_branch(self, params: CheckoutBranchParams) -> ToolResponse:
        """Switch to a branch, optionally creating it first."""
        repo_path = self._open_local(params.repo_path)
        branch_name = reject_option(params.branch_name.strip(), "branch name")

        if params.create:
            self._validate_branch_name(repo_path, branch_name)
            args = ["checkout", "-b", branch_name]
            if params.start_point:
                args.append(reject_option(params.start_point, "start point"))
            self._git(repo_path, *args)
            message = f"Created and checked out new branch: {branch_name}"
        else:
            self._git(repo_path, "checkout", branch_name, "--")
            message = f"Checked out branch: {branch_name}"

        logger.info(f"{message} ({repo_path})")
        return ToolResponse.success({"success": True, "message": message, "branch": branch_name})

    @tool_errors("delete branch")
    def delete_branch(self, params: DeleteBranchParams) -> ToolResponse:
        """Delete a local branch other than the checked out one."""
        repo_path = self._open_local(params.repo_path)
        branch_name = reject_option(params.branch_name.strip(), "branch name")

        if branch_name == self._current_branch(repo_path):
            return ToolResponse.failure("Cannot delete the currently checked out branch")

        self._git(repo_path, "branch", "-D" if params.force else "-d", branch_name)

        return ToolResponse.success({
            "success": True,
            "message": f"Deleted branch: {branch_name}",
            "branch": branch_name,
        })

    @tool_errors("merge branches")
    def merge_branch(self, params: MergeBranchParams) -> ToolResponse:
        """Merge a branch into the target (or current) branch."""
        repo_path = self._open_local(params.repo_path)
        source = reject_option(params.source_branch, "source branch")

        if params.target_branch:
            self._git(repo_path, "checkout", reject_option(params.target_branch, "target branch"), "--")

        args = ["merge", "--no-edit"]
        if params.no_fast_forward:
            args.append("--no-ff")
        args.append(source)

        try:
            output = self._git(repo_path, *args)
        except GitCommandError as e:
            return ToolResponse.failure(
                f"Failed to merge branches: {e}",
                conflicts=self._conflicted_files(repo_path),
            )

        return ToolResponse.success({
            "success": True,
            "result": output,
            "message": f"Merged {source} into {params.target_branch or 'current branch'}",
        })

    @tool_errors("rebase")
    def rebase(self, params: RebaseParams) -> ToolResponse:
        """Rebase the current branch onto another branch or commit."""
        if params.interactive:
            return ToolResponse.failure("Interactive rebase not supported through API")

        repo_path = self._open_local(params.repo_path)
        onto = reject_option(params.onto, "rebase target")

        try:
            output = self._git(repo_path, "rebase", onto)
        except GitCommandError as e:
            return ToolResponse.failure(
                f"Failed to rebase: {e}",
                conflicts=self._conflicted_files(repo_path),
            )

        return ToolResponse.success({
            "success": True,
            "message": f"Rebased onto {onto}",
            "result": output,
        })

    @tool_errors("reset repository")
    def reset(self, params: ResetParams) -> ToolResponse:
        """Move HEAD (and optionally index and worktree) to another commit."""
        repo_path = self._open_local(params.repo_path)
        target = reject_option(params.to, "reset target")

        self._git(repo_path, "reset", f"--{params.mode}", target)
        logger.info(f"Reset ({params.mode}) {repo_path} to {target}")

        return ToolResponse.success({
            "success": True,
            "message": f"Reset ({params.mode}) to {target}",
            "mode": params.mode,
            "target": target,
        })
