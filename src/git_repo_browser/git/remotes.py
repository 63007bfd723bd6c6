"""Tools that talk to, or manage, remotes of a local repository."""

import logging
import re
from pathlib import Path
from typing import Any, Dict, List

from git_repo_browser.git.base import GitToolsBase, reject_option, tool_errors
from git_repo_browser.git.params import PullParams, PushParams, RemoteParams
from git_repo_browser.git.runner import GitCommandError
from git_repo_browser.results import ToolResponse

logger = logging.getLogger(__name__)

REMOTE_LINE = re.compile(r"^(\S+)\s+(\S+)\s+\(([^)]+)\)$")


def parse_remote_list(output: str) -> List[Dict[str, str]]:
    """Group `git remote -v` lines into one entry per remote."""
    remotes: Dict[str, Dict[str, str]] = {}
    for line in output.strip().splitlines():
        match = REMOTE_LINE.match(line.strip())
        if not match:
            continue
        name, url, purpose = match.groups()
        remote = remotes.setdefault(name, {"name": name})
        if purpose in ("fetch", "push"):
            remote[f"{purpose}_url"] = url
    return list(remotes.values())


def parse_remote_show(name: str, output: str) -> Dict[str, Any]:
    """Pick the interesting parts out of `git remote show <name>`."""
    info: Dict[str, Any] = {
        "name": name,
        "fetch_url": "",
        "push_url": "",
        "head_branch": "",
        "remote_branches": [],
        "local_branches": [],
    }

    for line in output.strip().splitlines():
        stripped = line.strip()
        if stripped.startswith("Fetch URL:"):
            info["fetch_url"] = stripped[len("Fetch URL:"):].strip()
        elif stripped.startswith("Push  URL:"):
            info["push_url"] = stripped[len("Push  URL:"):].strip()
        elif stripped.startswith("HEAD branch:"):
            info["head_branch"] = stripped[len("HEAD branch:"):].strip()
        elif stripped.startswith(("Remote branch", "Local branch", "Local ref")):
            continue
        elif "merges with remote" in stripped:
            local, _, remote = stripped.partition("merges with remote")
            info["local_branches"].append({"local": local.strip(), "remote": remote.strip()})
        elif "tracked" in stripped:
            info["remote_branches"].append(stripped.split()[0])

    return info


class RemoteTools(GitToolsBase):
    """Push, pull and remote configuration tools."""

    def _branch_or_current(self, repo_path: Path, branch) -> str:
        if branch:
            return reject_option(branch, "branch name")
        current = self._current_branch(repo_path)
        if not current:
            raise ValueError("No branch given and HEAD is detached")
        return current

    @tool_errors("push changes")
    def push(self, params: PushParams) -> ToolResponse:
        """Push a branch (default: the current one) to a remote."""
        repo_path = self._open_local(params.repo_path)
        remote = reject_option(params.remote, "remote name")
        branch = self._branch_or_current(repo_path, params.branch)

        args = ["push"]
        if params.force:
            args.append("--force")
        args.extend([remote, branch])

        output = self._git_verbose(repo_path, *args)
        logger.info(f"Pushed {branch} to {remote} from {repo_path}")

        return ToolResponse.success({
            "success": True,
            "result": output,
            "message": f"Pushed {branch} to {remote}",
        })

    @tool_errors("pull changes")
    def pull(self, params: PullParams) -> ToolResponse:
        """Pull a branch (default: the current one) from a remote."""
        repo_path = self._open_local(params.repo_path)
        remote = reject_option(params.remote, "remote name")
        branch = self._branch_or_current(repo_path, params.branch)

        if params.rebase:
            args = ["pull", "--rebase", remote, branch]
        else:
            args = ["pull", "--no-rebase", "--no-edit", remote, branch]

        try:
            output = self._git_verbose(repo_path, *args)
        except GitCommandError as e:
            return ToolResponse.failure(
                f"Failed to pull changes: {e}",
                conflicts=self._conflicted_files(repo_path),
            )

        return ToolResponse.success({
            "success": True,
            "result": output,
            "message": f"Pulled from {remote}/{branch}",
        })

    @tool_errors("manage remote")
    def remote(self, params: RemoteParams) -> ToolResponse:
        """List, inspect or edit the remotes of a repository."""
        repo_path = self._open_local(params.repo_path)
        action = params.action
        name = params.name.strip()

        if action == "list":
            output = self._git(repo_path, "remote", "-v")
            return ToolResponse.success({"success": True, "remotes": parse_remote_list(output)})

        if not name:
            return ToolResponse.failure(f"Remote name is required for {action} action")
        reject_option(name, "remote name")

        if action in ("add", "set-url") and not params.url:
            return ToolResponse.failure(f"Remote URL is required for {action} action")
        if params.url:
            reject_option(params.url, "remote URL")

        url_type = "push" if params.push_url else "fetch"

        if action == "add":
            self._git(repo_path, "remote", "add", name, params.url)
            return ToolResponse.success({
                "success": True,
                "message": f"Added remote '{name}' with URL '{params.url}'",
                "name": name,
                "url": params.url,
            })

        if action == "remove":
            self._git(repo_path, "remote", "remove", name)
            return ToolResponse.success({"success": True, "message": f"Removed remote '{name}'"})

        if action == "set-url":
            args = ["remote", "set-url"]
            if params.push_url:
                args.append("--push")
            self._git(repo_path, *args, name, params.url)
            return ToolResponse.success({
                "success": True,
                "message": f"Updated {url_type} URL for remote '{name}' to '{params.url}'",
                "name": name,
                "url": params.url,
                "type": url_type,
            })

        if action == "get-url":
            args = ["remote", "get-url"]
            if params.push_url:
                args.append("--push")
            output = self._git(repo_path, *args, name)
            return ToolResponse.success({
                "success": True,
                "name": name,
                "urls": output.strip().splitlines(),
                "type": url_type,
            })

        if action == "rename":
            new_name = params.new_name.strip()
            if not new_name:
                return ToolResponse.failure("New remote name is required for rename action")
            reject_option(new_name, "remote name")
            self._git(repo_path, "remote", "rename", name, new_name)
            return ToolResponse.success({
                "success": True,
                "message": f"Renamed remote '{name}' to '{new_name}'",
            })

        if action == "prune":
            self._git_verbose(repo_path, "remote", "prune", name)
            return ToolResponse.success({"success": True, "message": f"Pruned remote '{name}'"})

        # show
        output = self._git(repo_path, "remote", "show", name)
        return ToolResponse.success({
            "success": True,
            "remote": parse_remote_show(name, output),
            "raw_output": output,
        })
