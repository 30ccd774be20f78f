"""
Repository introspection through the git executable.

All invocations are blocking and run to completion; a non-zero exit status is
always fatal to the caller.
"""

import os
import subprocess
from pathlib import Path
from typing import Dict, List, Optional

from .cli_config import GitConfig
from .error_handling import GitCommandError, ManifestNotFoundError, log_git_error
from .structured_logging import get_git_logger

# Messages git prints when a path is absent from a tree-ish. Matching them
# requires untranslated output, see _environment.
_MISSING_PATH_MARKERS = (
    "does not exist in",
    "exists on disk, but not in",
)


def _environment() -> Dict[str, str]:
    env = dict(os.environ)
    env["LC_ALL"] = "C"
    env["LANGUAGE"] = "C"
    return env


def git_change_diff(previous: Optional[str], commit: str) -> str:
    """Return the revision range between two revisions."""
    if previous:
        return f"{previous}..{commit}"
    return commit


class GitClient:
    """Runs git commands against one repository with explicit config overrides."""

    def __init__(
        self,
        repository: str = ".",
        configs: Optional[Dict[str, str]] = None,
        executable: str = "git",
    ):
        self.repository = Path(repository)
        self.configs = dict(configs or {})
        self.executable = executable
        self.logger = get_git_logger()

    @classmethod
    def from_config(cls, git_config: GitConfig) -> "GitClient":
        return cls(
            repository=git_config.repository,
            configs=git_config.configs,
            executable=git_config.executable,
        )

    def _command(self, args: List[str]) -> List[str]:
        command = [self.executable]
        for key, value in self.configs.items():
            command.extend(["-c", f"{key}={value}"])
        command.extend(str(arg) for arg in args)
        return command

    def _execute(self, args: List[str]) -> str:
        command = self._command(args)
        self.logger.debug("git_command", command=command[1:], cwd=str(self.repository))

        try:
            result = subprocess.run(
                command,
                cwd=self.repository,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                env=_environment(),
                check=False,
            )
        except OSError as e:
            raise GitCommandError(command, -1, str(e)) from e

        output = result.stdout.decode("utf-8", errors="replace")
        if result.returncode != 0:
            raise GitCommandError(command, result.returncode, output)
        return output

    def run(self, *args: str) -> str:
        """
        Run a git command and return its combined stdout and stderr.

        Raises:
            GitCommandError: If git exits with a non-zero status
        """
        try:
            return self._execute(list(args))
        except GitCommandError as e:
            log_git_error(
                f"git {args[0] if args else ''} failed",
                "git_client",
                "run",
                command=list(args),
                returncode=e.returncode,
                exception=e,
            )
            raise

    def show_file(self, revision: str, path: str) -> str:
        """
        Return the contents of a file as it existed at a revision.

        Raises:
            ManifestNotFoundError: If the file does not exist at the revision
            GitCommandError: For any other git failure
        """
        args = ["show", f"{revision}:{path}"]
        try:
            return self._execute(args)
        except GitCommandError as e:
            if any(marker in e.output for marker in _MISSING_PATH_MARKERS):
                raise ManifestNotFoundError(
                    f"{path} not found at {revision}: {e.output.strip()}",
                    path=path,
                    revision=revision,
                ) from e
            log_git_error(
                f"could not read {path} at {revision}",
                "git_client",
                "show_file",
                command=args,
                returncode=e.returncode,
                exception=e,
            )
            raise

    def log_oneline(self, previous: Optional[str], commit: str) -> str:
        """One line per commit: short hash followed by the subject."""
        return self.run("log", "--oneline", git_change_diff(previous, commit))

    def log_authors(self, previous: Optional[str], commit: str) -> str:
        """One ``email name`` line per commit."""
        return self.run("log", "--format=%aE %aN", git_change_diff(previous, commit))

    def rev_parse(self, revision: str) -> str:
        return self.run("rev-parse", revision).strip()
