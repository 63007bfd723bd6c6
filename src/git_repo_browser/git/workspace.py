"""Working tree housekeeping: stashes, tags, config, clean and archives."""

import logging
import re
from pathlib import Path
from typing import Dict, List, Union

from git_repo_browser.git.base import GitToolsBase, reject_option, tool_errors
from git_repo_browser.git.params import (
    ArchiveParams,
    CleanParams,
    ConfigParams,
    CreateTagParams,
    StashParams,
)
from git_repo_browser.results import ToolResponse

logger = logging.getLogger(__name__)

STASH_LINE = re.compile(r"^stash@\{(\d+)\}: (.*)$")


def parse_stash_list(output: str) -> List[Dict[str, Union[int, str]]]:
    stashes = []
    for line in output.strip().splitlines():
        match = STASH_LINE.match(line.strip())
        if match:
            stashes.append({"index": int(match.group(1)), "description": match.group(2)})
    return stashes


class WorkspaceTools(GitToolsBase):
    """Tools for stashing, tagging, configuring, cleaning and archiving."""

    @tool_errors("perform stash operation")
    def stash(self, params: StashParams) -> ToolResponse:
        """
        Save, list, apply, pop or drop stashes.

        pop, apply and drop check the index against the current stash list
        first, so a missing entry is reported as such instead of as a raw
        git error.
        """
        repo_path = self._open_local(params.repo_path)

        if params.action == "save":
            args = ["stash", "push"]
            if params.message:
                args.extend(["-m", params.message])
            output = self._git_verbose(repo_path, *args)
            if "No local changes to save" in output:
                return ToolResponse.success({
                    "success": True,
                    "message": "No local changes to save",
                    "stash_message": params.message,
                })
            return ToolResponse.success({
                "success": True,
                "message": "Changes stashed successfully",
                "stash_message": params.message,
            })

        stashes = parse_stash_list(self._git(repo_path, "stash", "list"))

        if params.action == "list":
            return ToolResponse.success({"success": True, "stashes": stashes})

        ref = f"stash@{{{params.index}}}"
        if params.index >= len(stashes):
            return ToolResponse.failure(f"Stash {ref} does not exist")

        self._git(repo_path, "stash", params.action, ref)

        messages = {
            "pop": f"Applied and dropped {ref}",
            "apply": f"Applied {ref}",
            "drop": f"Dropped {ref}",
        }
        return ToolResponse.success({"success": True, "message": messages[params.action]})

    @tool_errors("create tag")
    def create_tag(self, params: CreateTagParams) -> ToolResponse:
        """Create an annotated or lightweight tag at HEAD."""
        repo_path = self._open_local(params.repo_path)
        tag_name = reject_option(params.tag_name.strip(), "tag name")

        if not self.runner.run(["check-ref-format", f"refs/tags/{tag_name}"], cwd=repo_path).ok:
            raise ValueError(f"Invalid tag name '{tag_name}'")

        if params.annotated:
            # An annotated tag always needs a message; git would open an editor otherwise
            self._git(repo_path, "tag", "-a", tag_name, "-m", params.message or tag_name)
        else:
            self._git(repo_path, "tag", tag_name)

        return ToolResponse.success({
            "success": True,
            "message": f"Created {'annotated ' if params.annotated else ''}tag: {tag_name}",
            "tag": tag_name,
        })

    @tool_errors("set git config")
    def set_config(self, params: ConfigParams) -> ToolResponse:
        """Set a configuration value in the given scope."""
        repo_path = self._open_local(params.repo_path)
        key = reject_option(params.key.strip(), "config key")

        self._git(repo_path, "config", f"--{params.scope}", key, params.value)

        return ToolResponse.success({
            "success": True,
            "message": f"Set {params.scope} config {key}={params.value}",
            "key": key,
            "value": params.value,
            "scope": params.scope,
        })

    @tool_errors("clean repository")
    def clean(self, params: CleanParams) -> ToolResponse:
        """Remove (or list) untracked files."""
        if not params.force and not params.dry_run:
            return ToolResponse.failure("For safety, either force or dry_run must be true")

        repo_path = self._open_local(params.repo_path)
        directory_flag = ["-d"] if params.directories else []

        preview = self._git(repo_path, "clean", "--dry-run", *directory_flag)
        files = [
            line[len("Would remove "):].strip()
            for line in preview.splitlines()
            if line.startswith("Would remove ")
        ]

        if params.dry_run:
            message = f"Would remove {len(files)} files/directories"
        else:
            self._git(repo_path, "clean", "-f", *directory_flag)
            message = f"Removed {len(files)} files/directories"
            logger.info(f"Cleaned {len(files)} untracked entries from {repo_path}")

        return ToolResponse.success({
            "success": True,
            "message": message,
            "files": files,
            "dry_run": params.dry_run,
        })

    @tool_errors("create archive")
    def archive(self, params: ArchiveParams) -> ToolResponse:
        """Write a zip or tar archive of a tree-ish."""
        repo_path = self._open_local(params.repo_path)
        treeish = reject_option(params.treeish, "tree-ish")

        output_path = Path(params.output_path).expanduser()
        if not output_path.is_absolute():
            output_path = repo_path / output_path

        args = ["archive", f"--format={params.format}"]
        prefix = params.prefix.strip("/")
        if prefix:
            args.append(f"--prefix={prefix}/")
        args.extend(["-o", str(output_path), treeish])

        self._git(repo_path, *args)

        if not output_path.is_file():
            return ToolResponse.failure("Failed to create archive: output file not found")

        return ToolResponse.success({
            "success": True,
            "message": f"Created {params.format} archive at {output_path}",
            "format": params.format,
            "output_path": str(output_path),
            "size_bytes": output_path.stat().st_size,
            "treeish": treeish,
        })
