"""Tests for cascade_bump.git."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, call, patch

from conftest import make_module

from cascade_bump.git import (
    LOG_FORMAT,
    collect_commits,
    find_last_tag,
    get_commits,
    module_pathspecs,
    parse_log,
)
from cascade_bump.models import ModuleKind
from cascade_bump.registry import ModuleRegistry

ROOT = Path("/repo")


def workspace_registry() -> ModuleRegistry:
    return ModuleRegistry(
        [
            make_module("app", kind=ModuleKind.ROOT, dependents={"core", "core-extras"}),
            make_module("core"),
            make_module("core-extras"),
        ]
    )


def log_output(*messages: tuple[str, str]) -> str:
    return "".join(f"{sha}\x1f{message}\n\x1e\n" for sha, message in messages)


class TestFindLastTag:
    """Tests for find_last_tag()."""

    @patch("cascade_bump.git.git")
    def test_returns_most_recent_tag(self, mock_git: MagicMock) -> None:
        """When tags exist, returns the highest version."""
        mock_git.return_value = "core@1.0.0\ncore@1.2.0\ncore@1.1.0"

        assert find_last_tag(make_module("core"), ROOT) == "core@1.2.0"
        mock_git.assert_called_once_with("tag", "--list", "core@*", cwd=ROOT, check=False)

    @patch("cascade_bump.git.git")
    def test_release_outranks_its_prereleases(self, mock_git: MagicMock) -> None:
        mock_git.return_value = "pkg@1.0.0-alpha.1\npkg@1.0.0\npkg@1.0.0-rc.0\npkg@0.9.0"
        assert find_last_tag(make_module("pkg"), ROOT) == "pkg@1.0.0"

    @patch("cascade_bump.git.git")
    def test_numeric_not_lexical_order(self, mock_git: MagicMock) -> None:
        mock_git.return_value = "core@1.9.0\ncore@1.10.0\ncore@1.10.0-beta.2"
        assert find_last_tag(make_module("core"), ROOT) == "core@1.10.0"

    @patch("cascade_bump.git.git")
    def test_skips_non_version_tags(self, mock_git: MagicMock) -> None:
        mock_git.return_value = "core@latest\ncore@1.0.0"
        assert find_last_tag(make_module("core"), ROOT) == "core@1.0.0"

    @patch("cascade_bump.git.git")
    def test_returns_none_when_no_tags(self, mock_git: MagicMock) -> None:
        mock_git.return_value = ""
        assert find_last_tag(make_module("core"), ROOT) is None

    @patch("cascade_bump.git.git")
    def test_root_falls_back_to_v_tags(self, mock_git: MagicMock) -> None:
        mock_git.side_effect = lambda *args, **kwargs: (
            "" if args[2] == "app@*" else "v1.2.0-rc.1\nv1.1.0\nv1.2.0"
        )

        assert find_last_tag(make_module("app", kind=ModuleKind.ROOT), ROOT) == "v1.2.0"
        assert mock_git.call_args_list == [
            call("tag", "--list", "app@*", cwd=ROOT, check=False),
            call("tag", "--list", "v*", cwd=ROOT, check=False),
        ]

    @patch("cascade_bump.git.git")
    def test_root_prefers_own_tags(self, mock_git: MagicMock) -> None:
        mock_git.return_value = "app@2.0.0"

        assert find_last_tag(make_module("app", kind=ModuleKind.ROOT), ROOT) == "app@2.0.0"
        mock_git.assert_called_once()

    @patch("cascade_bump.git.git")
    def test_submodule_ignores_v_tags(self, mock_git: MagicMock) -> None:
        mock_git.return_value = ""

        assert find_last_tag(make_module("core"), ROOT) is None
        mock_git.assert_called_once()


class TestModulePathspecs:
    def test_root_excludes_members(self) -> None:
        registry = workspace_registry()
        specs = module_pathspecs(registry.get("app"), registry)
        assert specs == [".", ":(exclude)core", ":(exclude)core-extras"]

    def test_sibling_with_common_prefix_not_excluded(self) -> None:
        registry = workspace_registry()
        assert module_pathspecs(registry.get("core"), registry) == ["core"]

    def test_nested_member(self) -> None:
        registry = ModuleRegistry(
            [make_module("libs/a"), make_module("libs/a/plugins"), make_module("libs/b")]
        )
        specs = module_pathspecs(registry.get("libs/a"), registry)
        assert specs == ["libs/a", ":(exclude)libs/a/plugins"]


class TestParseLog:
    def test_parses_records(self) -> None:
        output = log_output(
            ("a" * 40, "feat(core): add thing\n\nBody text"),
            ("b" * 40, "fix!: break it"),
        )
        commits = parse_log(output)

        assert [c.hash for c in commits] == ["a" * 40, "b" * 40]
        assert commits[0].type == "feat"
        assert commits[0].scope == "core"
        assert commits[1].breaking

    def test_empty(self) -> None:
        assert parse_log("") == []

    def test_non_conventional_message(self) -> None:
        (commit,) = parse_log(log_output(("c" * 40, "Initial commit")))
        assert commit.type == "unknown"


class TestGetCommits:
    @patch("cascade_bump.git.git")
    def test_since_tag(self, mock_git: MagicMock) -> None:
        mock_git.return_value = log_output(("a" * 40, "fix: x"))
        registry = workspace_registry()

        commits = get_commits(registry.get("app"), registry, ROOT, "app@1.0.0")

        assert len(commits) == 1
        mock_git.assert_called_once_with(
            "log",
            LOG_FORMAT,
            "app@1.0.0..HEAD",
            "--",
            ".",
            ":(exclude)core",
            ":(exclude)core-extras",
            cwd=ROOT,
        )

    @patch("cascade_bump.git.git")
    def test_full_history_without_tag(self, mock_git: MagicMock) -> None:
        mock_git.return_value = ""
        registry = workspace_registry()

        assert get_commits(registry.get("core"), registry, ROOT, None) == []
        mock_git.assert_called_once_with("log", LOG_FORMAT, "HEAD", "--", "core", cwd=ROOT)


class TestCollectCommits:
    @patch("cascade_bump.git.get_commits")
    @patch("cascade_bump.git.find_last_tag")
    def test_every_module(self, mock_tag: MagicMock, mock_commits: MagicMock) -> None:
        registry = workspace_registry()
        mock_tag.side_effect = lambda module, root: "core@1.0.0" if module.id == "core" else None
        mock_commits.return_value = parse_log(log_output(("a" * 40, "feat: y")))

        result = collect_commits(registry, ROOT)

        assert set(result) == {"app", "core", "core-extras"}
        assert result["core"].last_tag == "core@1.0.0"
        assert result["app"].last_tag is None
        assert result["core"].commits[0].type == "feat"
        assert mock_commits.call_args_list[1] == call(
            registry.get("core"), registry, ROOT, "core@1.0.0"
        )
