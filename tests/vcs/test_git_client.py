import unittest
from pathlib import Path
from unittest.mock import patch

import pytest

from git_version_bump.errors import CommandFailure
from git_version_bump.vcs.git_client import (
    RELEASE_TAG_PATTERN,
    DescribeResult,
    GitClient,
    parse_describe,
)


class TestParseDescribe(unittest.TestCase):
    def test_exact_tag(self) -> None:
        result = parse_describe("v1.2.3\n")
        self.assertEqual(result, DescribeResult(tag="v1.2.3"))
        self.assertEqual(result.to_version(), "1.2.3")

    def test_commits_since_tag(self) -> None:
        result = parse_describe("v1.2.3-4-gdeadbee")
        self.assertEqual(result.tag, "v1.2.3")
        self.assertEqual(result.commits_since, 4)
        self.assertEqual(result.abbrev_id, "deadbee")
        self.assertFalse(result.dirty)
        self.assertEqual(result.to_version(), "1.2.3.4")

    def test_dirty_marker(self) -> None:
        result = parse_describe("v2.0.0-10-g0123abc-dirty")
        self.assertTrue(result.dirty)
        self.assertEqual(result.to_version(), "2.0.0.10")

        result = parse_describe("v2.0.0-dirty")
        self.assertTrue(result.dirty)
        self.assertIsNone(result.commits_since)
        self.assertEqual(result.to_version(), "2.0.0")

    def test_hyphenated_tag_keeps_its_name(self) -> None:
        result = parse_describe("v1.2.3-rc1-2-gabcdef0")
        self.assertEqual(result.tag, "v1.2.3-rc1")
        self.assertEqual(result.commits_since, 2)
        self.assertEqual(result.to_version(), "1.2.3.rc1.2")
        self.assertEqual(parse_describe("v1.2.3-rc1").to_version(), "1.2.3.rc1")

    def test_warnings_before_answer_are_skipped(self) -> None:
        output = (
            "warning: tag 'v1.2.4' is externally known as 'v1.2.3'\n"
            "v1.2.3-0-g62bb596\n"
        )
        result = parse_describe(output)
        self.assertEqual(result.tag, "v1.2.3")
        self.assertEqual(result.commits_since, 0)
        self.assertEqual(result.to_version(), "1.2.3")

    def test_only_warnings_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            parse_describe("warning: something odd\n")

    def test_bare_commit_id(self) -> None:
        result = parse_describe("abc1234")
        self.assertEqual(result.tag, "abc1234")
        self.assertIsNone(result.abbrev_id)

    def test_empty_output_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            parse_describe("\n")


class TestGitClient(unittest.TestCase):
    def test_describe_arguments(self) -> None:
        calls = []

        def fake_run(self, args, description):
            calls.append(args)
            return "v1.0.0-1-gabcdef0\n"

        with patch.object(GitClient, "_run", autospec=True) as mock_run:
            mock_run.side_effect = fake_run
            client = GitClient(Path("/repo"))
            client.describe()
            client.describe(include_lite_tags=True, always=True, dirty=False)

        self.assertEqual(calls[0], ["describe", f"--match={RELEASE_TAG_PATTERN}", "--dirty"])
        self.assertEqual(
            calls[1], ["describe", f"--match={RELEASE_TAG_PATTERN}", "--tags", "--always"]
        )

    def test_commit_timestamps_and_subjects(self) -> None:
        outputs = {
            "--format=%at": "1704499200\n1704412800\n\n",
            "--format=%s": "Fix the frobnicator\n\nAdd widgets\n",
        }

        def fake_run(self, args, description):
            return outputs[args[1]]

        with patch.object(GitClient, "_run", autospec=True) as mock_run:
            mock_run.side_effect = fake_run
            client = GitClient(Path("/repo"))
            self.assertEqual(client.commit_timestamps(), [1704499200, 1704412800])
            self.assertEqual(client.commit_subjects("v1.0.0"), ["Fix the frobnicator", "Add widgets"])
            self.assertEqual(mock_run.call_args.args[1], ["log", "--format=%s", "v1.0.0..HEAD"])

    def test_tag_and_push_commands(self) -> None:
        calls = []

        def fake_run(self, args, description):
            calls.append(args)
            return ""

        with patch.object(GitClient, "_run", autospec=True) as mock_run:
            mock_run.side_effect = fake_run
            client = GitClient(Path("/repo"))
            client.create_tag("v1.2.3", message="Version v1.2.3")
            client.create_tag("v1.2.4", message_file=Path("/tmp/notes.txt"))
            client.push()
            client.push(tags=True)
            client.push(remote="upstream", tags=True)

        self.assertEqual(
            calls,
            [
                ["tag", "-a", "-m", "Version v1.2.3", "v1.2.3"],
                ["tag", "-a", "-F", "/tmp/notes.txt", "v1.2.4"],
                ["push"],
                ["push", "--tags"],
                ["push", "upstream", "--tags"],
            ],
        )


def test_get_config_unset_returns_none(scripted_runner):
    client = GitClient(Path("/repo"), scripted_runner)
    assert client.get_config("versionBump.versionOverride") is None
    assert scripted_runner.calls == [["git", "config", "--get", "versionBump.versionOverride"]]
    assert scripted_runner.cwds == [Path("/repo")]


def test_get_config_returns_stripped_value(scripted_runner):
    scripted_runner.on("config", "--get", output="3.1.4\n")
    client = GitClient(Path("/repo"), scripted_runner)
    assert client.get_config("versionBump.versionOverride") == "3.1.4"


def test_get_config_propagates_real_failures(scripted_runner):
    scripted_runner.on("config", "--get", output="fatal: not in a git directory\n", status=128)
    client = GitClient(Path("/repo"), scripted_runner)
    with pytest.raises(CommandFailure):
        client.get_config("versionBump.versionOverride")


def test_unset_config_tolerates_missing_key(scripted_runner):
    scripted_runner.on("config", "--local", "--unset", status=5)
    client = GitClient(Path("/repo"), scripted_runner)
    client.unset_config("versionBump.versionOverride")

    scripted_runner.on("config", "--local", "--unset", output="error: could not lock config file\n", status=255)
    with pytest.raises(CommandFailure):
        client.unset_config("versionBump.versionOverride")


def test_set_config_writes_local_key(scripted_runner):
    client = GitClient(Path("/repo"), scripted_runner)
    client.set_config("versionBump.versionOverride", "9.9.9")
    assert scripted_runner.calls[-1] == [
        "git", "config", "--local", "versionBump.versionOverride", "9.9.9"
    ]


def test_last_commit_date(scripted_runner):
    scripted_runner.on("log", "-1", output="2024-01-06\n")
    client = GitClient(Path("/repo"), scripted_runner)
    assert client.last_commit_date() == "2024-01-06"

    scripted_runner.on("log", "-1", output="warning: refname 'HEAD' is ambiguous.\n2024-01-07\n")
    assert client.last_commit_date() == "2024-01-07"


def test_commit_timestamps_skip_warning_lines(scripted_runner):
    scripted_runner.on("log", "--format=%at", output="warning: refname 'HEAD' is ambiguous.\n1704499200\n")
    client = GitClient(Path("/repo"), scripted_runner)
    assert client.commit_timestamps() == [1704499200]


def test_status_porcelain_keeps_entries_and_drops_warnings(scripted_runner):
    scripted_runner.on("status", output="warning: could not open directory 'cache/'\n M setup.cfg\n")
    client = GitClient(Path("/repo"), scripted_runner)
    assert client.status_porcelain() == " M setup.cfg\n"
    assert scripted_runner.calls[-1] == ["git", "status", "--porcelain", "--untracked-files=no"]

    scripted_runner.on("status", output="warning: could not open directory 'cache/'\n")
    assert client.status_porcelain() == ""


def test_git_dir(scripted_runner):
    scripted_runner.on("rev-parse", "--git-dir", output=".git\n")
    client = GitClient(Path("/repo"), scripted_runner)
    assert client.git_dir() == ".git"


if __name__ == "__main__":
    unittest.main()
