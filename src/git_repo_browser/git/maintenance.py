"""Repository plumbing tools: hooks, .gitattributes and Git LFS."""

import logging
import stat
from pathlib import Path
from typing import Dict, List

from git_repo_browser.git.base import GitToolsBase, reject_option, tool_errors
from git_repo_browser.git.params import AttributesParams, HooksParams, LfsFetchParams, LfsParams
from git_repo_browser.git.runner import GitCommandError
from git_repo_browser.results import ToolResponse

logger = logging.getLogger(__name__)

LFS_MISSING = "Git LFS is not installed on the system"
EXECUTABLE_BITS = stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH


class LfsNotInstalledError(Exception):
    """Raised when the git-lfs extension is not available."""

    pass


def _is_executable(path: Path) -> bool:
    return bool(path.stat().st_mode & EXECUTABLE_BITS)


def _split_attribute_line(line: str) -> List[str]:
    return line.strip().split()


def parse_lfs_patterns(output: str) -> List[str]:
    """Extract patterns from `git lfs track` listing lines like `    *.psd (.gitattributes)`."""
    patterns = []
    for line in output.splitlines():
        if " (" not in line:
            continue
        pattern = line.split(" (", 1)[0].strip()
        if pattern:
            patterns.append(pattern)
    return patterns


class MaintenanceTools(GitToolsBase):
    """Tools for hooks, attributes and large file storage."""

    def _hooks_dir(self, repo_path: Path) -> Path:
        # Honors core.hooksPath and linked worktrees
        return repo_path / self._git(repo_path, "rev-parse", "--git-path", "hooks").strip()

    def _lfs(self, repo_path: Path, *args: str) -> str:
        result = self.runner.run(["lfs", *args], cwd=repo_path)
        if not result.ok:
            if "is not a git command" in result.stderr:
                raise LfsNotInstalledError(LFS_MISSING)
            raise GitCommandError(["lfs", *args], result.returncode, result.stderr, result.stdout)
        return result.stdout.strip()

    @tool_errors("manage hook")
    def hooks(self, params: HooksParams) -> ToolResponse:
        """List, read or install repository hooks."""
        repo_path = self._open_local(params.repo_path)
        hooks_dir = self._hooks_dir(repo_path)

        if params.action == "list":
            hooks = []
            if hooks_dir.is_dir():
                for hook_path in sorted(hooks_dir.iterdir()):
                    if hook_path.name.endswith(".sample") or not hook_path.is_file():
                        continue
                    hooks.append({
                        "name": hook_path.name,
                        "path": str(hook_path),
                        "size": hook_path.stat().st_size,
                        "executable": _is_executable(hook_path),
                    })
            return ToolResponse.success({"success": True, "hooks": hooks})

        if not params.hook_name.strip():
            return ToolResponse.failure(f"Hook name is required for {params.action} action")
        hook_name = self._sanitize_name(params.hook_name, "hook")
        hook_path = hooks_dir / hook_name

        if params.action == "get":
            if not hook_path.is_file():
                return ToolResponse.failure(f"Hook '{hook_name}' does not exist")
            return ToolResponse.success({
                "success": True,
                "name": hook_name,
                "content": hook_path.read_text(encoding="utf-8"),
                "executable": _is_executable(hook_path),
            })

        # create
        if not params.script:
            return ToolResponse.failure("Script content is required for create action")

        hooks_dir.mkdir(parents=True, exist_ok=True)
        hook_path.write_text(params.script, encoding="utf-8")
        hook_path.chmod(0o755)
        logger.info(f"Installed hook {hook_path}")

        return ToolResponse.success({
            "success": True,
            "message": f"Created hook '{hook_name}'",
            "path": str(hook_path),
        })

    @tool_errors("manage git attributes")
    def attributes(self, params: AttributesParams) -> ToolResponse:
        """Read or edit the repository's top-level .gitattributes."""
        repo_path = self._open_local(params.repo_path)
        attributes_path = repo_path / ".gitattributes"
        pattern = params.pattern.strip()

        if params.action == "list":
            if not attributes_path.is_file():
                return ToolResponse.success({
                    "success": True,
                    "attributes": [],
                    "message": ".gitattributes file does not exist",
                })
            entries = []
            for line in attributes_path.read_text(encoding="utf-8").splitlines():
                if not line.strip() or line.startswith("#"):
                    continue
                parts = _split_attribute_line(line)
                entries.append({"pattern": parts[0], "attributes": parts[1:]})
            return ToolResponse.success({"success": True, "attributes": entries})

        if not pattern:
            return ToolResponse.failure(f"Pattern is required for {params.action} action")

        if params.action == "get":
            if not attributes_path.is_file():
                return ToolResponse.success({
                    "success": True,
                    "pattern": pattern,
                    "attributes": [],
                    "message": ".gitattributes file does not exist",
                })
            found: List[str] = []
            for line in attributes_path.read_text(encoding="utf-8").splitlines():
                parts = _split_attribute_line(line)
                if parts and parts[0] == pattern:
                    found.extend(parts[1:])
            result: Dict[str, object] = {"success": True, "pattern": pattern, "attributes": found}
            if not found:
                result["message"] = f"No attributes found for pattern '{pattern}'"
            return ToolResponse.success(result)

        # set
        attribute = params.attribute.strip()
        if not attribute:
            return ToolResponse.failure("Attribute is required for set action")

        lines = []
        if attributes_path.is_file():
            lines = attributes_path.read_text(encoding="utf-8").splitlines()

        for index, line in enumerate(lines):
            parts = _split_attribute_line(line)
            if parts and parts[0] == pattern:
                if attribute not in parts:
                    lines[index] = " ".join(parts + [attribute])
                break
        else:
            lines.append(f"{pattern} {attribute}")

        attributes_path.write_text("\n".join(line for line in lines if line) + "\n", encoding="utf-8")

        return ToolResponse.success({
            "success": True,
            "message": f"Set attribute '{attribute}' for pattern '{pattern}'",
            "pattern": pattern,
            "attribute": attribute,
        })

    @tool_errors("perform LFS operation")
    def lfs(self, params: LfsParams) -> ToolResponse:
        """Install Git LFS or manage the patterns it tracks."""
        repo_path = self._open_local(params.repo_path)

        try:
            if params.action == "install":
                output = self._lfs(repo_path, "install")
                return ToolResponse.success({
                    "success": True,
                    "message": "Git LFS installed successfully",
                    "output": output,
                })

            if params.action == "list":
                output = self._lfs(repo_path, "track")
                return ToolResponse.success({
                    "success": True,
                    "tracked_patterns": parse_lfs_patterns(output),
                })

            if not params.patterns:
                return ToolResponse.failure(
                    f"At least one pattern is required for {params.action} action"
                )

            results = [
                {
                    "pattern": pattern,
                    "output": self._lfs(repo_path, params.action, reject_option(pattern, "pattern")),
                }
                for pattern in params.patterns
            ]
        except LfsNotInstalledError as e:
            return ToolResponse.failure(str(e))

        verb = "Tracked" if params.action == "track" else "Untracked"
        preposition = "with" if params.action == "track" else "from"
        return ToolResponse.success({
            "success": True,
            "message": f"{verb} {len(params.patterns)} pattern(s) {preposition} Git LFS",
            "patterns": params.patterns,
            "results": results,
        })

    @tool_errors("fetch LFS objects")
    def lfs_fetch(self, params: LfsFetchParams) -> ToolResponse:
        """
        Fetch Git LFS objects for the current checkout.

        With pointers set, pointer files in the working tree are replaced by
        the fetched content afterwards (skipped on a dry run).
        """
        repo_path = self._open_local(params.repo_path)

        args = ["fetch"]
        if params.dry_run:
            args.append("--dry-run")

        try:
            output = self._lfs(repo_path, *args)
            if params.pointers and not params.dry_run:
                checkout_output = self._lfs(repo_path, "checkout")
                output = "\n".join(part for part in (output, checkout_output) if part)
        except LfsNotInstalledError as e:
            return ToolResponse.failure(str(e))

        return ToolResponse.success({
            "success": True,
            "message": "Git LFS fetch completed",
            "output": output,
            "dry_run": params.dry_run,
        })
