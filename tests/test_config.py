"""Tests for config module."""

import json
from pathlib import Path

import pytest

from repo_updater.config import (
    CONFIG_FILENAME,
    Config,
    config_search_paths,
    load_config,
    validate_repos,
)
from repo_updater.errors import ConfigNotFoundError, ConfigParseError


@pytest.fixture
def isolated_dirs(tmp_path: Path, monkeypatch) -> tuple[Path, Path]:
    """Point cwd and XDG_CONFIG_HOME at empty temporary directories."""
    cwd = tmp_path / "cwd"
    xdg = tmp_path / "xdg"
    cwd.mkdir()
    xdg.mkdir()
    monkeypatch.chdir(cwd)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(xdg))
    return cwd, xdg


def write_json(path: Path, data) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data))
    return path


class TestConfigSearchPaths:
    def test_explicit_path_only(self, tmp_path):
        path = tmp_path / "custom.json"
        assert config_search_paths(path) == [path]

    def test_default_order(self, isolated_dirs):
        cwd, xdg = isolated_dirs
        assert config_search_paths() == [
            cwd / CONFIG_FILENAME,
            xdg / "repo-updater" / "config.json",
        ]

    def test_home_fallback_without_xdg(self, monkeypatch, tmp_path):
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        monkeypatch.setenv("HOME", str(tmp_path))
        paths = config_search_paths()
        assert paths[1] == tmp_path / ".config" / "repo-updater" / "config.json"


class TestLoadConfig:
    def test_loads_from_cwd(self, isolated_dirs):
        cwd, _ = isolated_dirs
        path = write_json(cwd / CONFIG_FILENAME, {"repos": ["/a", "/b"]})

        config = load_config()

        assert config.repos == ["/a", "/b"]
        assert config.path == path

    def test_cwd_wins_over_user_config(self, isolated_dirs):
        cwd, xdg = isolated_dirs
        write_json(cwd / CONFIG_FILENAME, {"repos": ["/from-cwd"]})
        write_json(xdg / "repo-updater" / "config.json", {"repos": ["/from-user"]})

        assert load_config().repos == ["/from-cwd"]

    def test_falls_back_to_user_config(self, isolated_dirs):
        _, xdg = isolated_dirs
        write_json(xdg / "repo-updater" / "config.json", {"repos": ["/from-user"]})

        assert load_config().repos == ["/from-user"]

    def test_explicit_path(self, tmp_path, isolated_dirs):
        path = write_json(tmp_path / "mine.json", {"repos": ["/x"]})
        assert load_config(path).repos == ["/x"]

    def test_explicit_path_skips_defaults(self, tmp_path, isolated_dirs):
        cwd, _ = isolated_dirs
        write_json(cwd / CONFIG_FILENAME, {"repos": ["/from-cwd"]})

        with pytest.raises(ConfigNotFoundError):
            load_config(tmp_path / "missing.json")

    def test_not_found_lists_searched_paths(self, isolated_dirs):
        cwd, _ = isolated_dirs

        with pytest.raises(ConfigNotFoundError) as exc:
            load_config()

        assert exc.value.kind == "ConfigNotFound"
        assert str(cwd / CONFIG_FILENAME) in exc.value.message
        assert len(exc.value.searched) == 2

    def test_empty_object_is_parse_error(self, isolated_dirs):
        cwd, _ = isolated_dirs
        write_json(cwd / CONFIG_FILENAME, {})

        with pytest.raises(ConfigParseError) as exc:
            load_config()

        assert exc.value.kind == "ConfigParse"
        assert "'repos'" in exc.value.message

    def test_invalid_json_is_parse_error(self, isolated_dirs):
        cwd, _ = isolated_dirs
        (cwd / CONFIG_FILENAME).write_text("{not json")

        with pytest.raises(ConfigParseError) as exc:
            load_config()

        assert str(cwd / CONFIG_FILENAME) in exc.value.message

    @pytest.mark.parametrize(
        "data",
        [
            [],
            {"repos": "/a"},
            {"repos": ["/a", 1]},
            {"repos": None},
        ],
    )
    def test_malformed_repos_is_parse_error(self, isolated_dirs, data):
        cwd, _ = isolated_dirs
        write_json(cwd / CONFIG_FILENAME, data)

        with pytest.raises(ConfigParseError):
            load_config()

    def test_empty_repo_list_is_allowed(self, isolated_dirs):
        cwd, _ = isolated_dirs
        write_json(cwd / CONFIG_FILENAME, {"repos": []})
        assert load_config().repos == []

    def test_extra_keys_ignored(self, isolated_dirs):
        cwd, _ = isolated_dirs
        write_json(cwd / CONFIG_FILENAME, {"repos": ["/a"], "theme": "dark"})
        assert load_config() == Config(repos=["/a"])


class TestValidateRepos:
    def test_splits_repos(self, tmp_path, git_repo):
        plain = tmp_path / "plain"
        plain.mkdir()
        missing = tmp_path / "missing"

        result = validate_repos([str(git_repo), str(plain), str(missing)])

        assert result.valid == [str(git_repo)]
        assert [e.path for e in result.not_git] == [str(plain)]
        assert [e.path for e in result.missing] == [str(missing)]
        assert result.missing[0].kind == "DirectoryNotFound"

    def test_preserves_order(self, tmp_path):
        repos = []
        for name in ["b", "a", "c"]:
            (tmp_path / name / ".git").mkdir(parents=True)
            repos.append(str(tmp_path / name))

        assert validate_repos(repos).valid == repos

    def test_git_worktree_file_counts(self, tmp_path):
        """Linked worktrees have a .git file instead of a directory."""
        repo = tmp_path / "worktree"
        repo.mkdir()
        (repo / ".git").write_text("gitdir: /elsewhere")

        assert validate_repos([str(repo)]).valid == [str(repo)]
