import shutil
import subprocess
from pathlib import Path
from typing import Dict, List, Sequence, Tuple

import pytest

from git_version_bump.vcs.command_runner import CommandOutcome, CommandRunner


class ScriptedRunner(CommandRunner):
    """CommandRunner that answers git commands from a script instead of running them.

    Responses are registered against the leading arguments after ``git``;
    the longest matching prefix wins. Unregistered commands succeed with no
    output. Every command is recorded in ``calls``.
    """

    def __init__(self) -> None:
        super().__init__(env={})
        self.rules: Dict[Tuple[str, ...], CommandOutcome] = {}
        self.calls: List[List[str]] = []
        self.cwds: List[Path] = []

    def on(self, *prefix: str, output: str = "", status: int = 0) -> "ScriptedRunner":
        self.rules[tuple(prefix)] = CommandOutcome(text=output, exit_status=status)
        return self

    def capture(self, argv: Sequence[str], cwd=None) -> CommandOutcome:
        self.calls.append(list(argv))
        self.cwds.append(cwd)
        args = tuple(argv[1:])
        best = None
        for prefix, outcome in self.rules.items():
            if args[: len(prefix)] == prefix and (best is None or len(prefix) > len(best[0])):
                best = (prefix, outcome)
        return best[1] if best else CommandOutcome(text="", exit_status=0)

    def subcommands(self) -> List[str]:
        return [call[1] for call in self.calls if len(call) > 1]


@pytest.fixture
def scripted_runner() -> ScriptedRunner:
    """A runner for a clean repository with no overrides configured."""
    runner = ScriptedRunner()
    runner.on("config", "--get", status=1)
    return runner


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch):
    """Keep the user's debug and editor settings out of the tests."""
    monkeypatch.delenv("GVB_DEBUG", raising=False)
    monkeypatch.delenv("EDITOR", raising=False)


def git(repo: Path, *args: str, env=None) -> str:
    result = subprocess.run(
        ["git", *args], cwd=repo, check=True, capture_output=True, text=True, env=env
    )
    return result.stdout


@pytest.fixture
def run_git():
    """Run a real git command in a repository and return its stdout."""
    return git


@pytest.fixture
def git_repo(tmp_path, monkeypatch) -> Path:
    """An empty git repository with a committer identity configured."""
    if shutil.which("git") is None:
        pytest.skip("git is not installed")
    repo = tmp_path / "repo"
    repo.mkdir()
    git(repo, "init", "-q")
    git(repo, "config", "user.name", "Test User")
    git(repo, "config", "user.email", "test@example.com")
    git(repo, "config", "commit.gpgsign", "false")
    git(repo, "config", "tag.gpgsign", "false")
    monkeypatch.chdir(repo)
    return repo
