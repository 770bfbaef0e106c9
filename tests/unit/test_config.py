"""Tests for configuration models, YAML loading and environment overrides."""

import os
from pathlib import Path
from textwrap import dedent

import pytest
from pydantic import ValidationError

from src.core.config import GitHubConfig, Settings


class TestGitHubConfig:
    def test_defaults(self) -> None:
        c = GitHubConfig()
        assert c.owner == "your-username"
        assert c.repo == "job-search-repo"
        assert c.token == ""
        assert c.api_url == "https://api.github.com"
        assert c.timeout_seconds == 10.0

    def test_token_hidden_from_repr(self) -> None:
        assert "secret" not in repr(GitHubConfig(token="secret"))

    def test_blank_owner_rejected(self) -> None:
        with pytest.raises(ValidationError):
            GitHubConfig(owner="   ")

    def test_owner_stripped(self) -> None:
        assert GitHubConfig(owner="  octocat ").owner == "octocat"

    def test_timeout_positive(self) -> None:
        with pytest.raises(ValidationError):
            GitHubConfig(timeout_seconds=0)


class TestFromYaml:
    def test_load(self, tmp_path: Path) -> None:
        path = tmp_path / "settings.yaml"
        path.write_text(dedent("""\
            github:
              owner: octocat
              repo: jobs
              timeout_seconds: 5
            debug_logging: true
        """))

        settings = Settings.from_yaml(path)

        assert settings.github.owner == "octocat"
        assert settings.github.repo == "jobs"
        assert settings.github.timeout_seconds == 5.0
        assert settings.debug_logging is True

    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "settings.yaml"
        path.write_text("")
        assert Settings.from_yaml(path) == Settings()

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            Settings.from_yaml(tmp_path / "nope.yaml")

    def test_invalid_values(self, tmp_path: Path) -> None:
        path = tmp_path / "settings.yaml"
        path.write_text("github:\n  timeout_seconds: -1\n")
        with pytest.raises(ValidationError):
            Settings.from_yaml(path)


class TestFromEnv:
    def test_reads_variables(self) -> None:
        settings = Settings.from_env({
            "GITHUB_TOKEN": "tok",
            "GITHUB_OWNER": "octocat",
            "GITHUB_REPO": "jobs",
            "GITHUB_API_URL": "https://ghe.example.com/api/v3",
            "DEBUG_LOGGING": "true",
        })
        assert settings.github.token == "tok"
        assert settings.github.owner == "octocat"
        assert settings.github.repo == "jobs"
        assert settings.github.api_url == "https://ghe.example.com/api/v3"
        assert settings.debug_logging is True

    def test_defaults_when_unset(self) -> None:
        settings = Settings.from_env({})
        assert settings.github.owner == "your-username"
        assert settings.github.repo == "job-search-repo"
        assert settings.debug_logging is False

    @pytest.mark.parametrize(("value", "expected"), [("TRUE", True), ("false", False), ("1", False)])
    def test_debug_flag(self, value: str, expected: bool) -> None:
        assert Settings.from_env({"DEBUG_LOGGING": value}).debug_logging is expected

    def test_env_overrides_yaml_values(self) -> None:
        base = Settings(github=GitHubConfig(owner="from-yaml", repo="yaml-repo"), debug_logging=True)
        merged = base.with_env({"GITHUB_OWNER": "from-env"})
        assert merged.github.owner == "from-env"
        assert merged.github.repo == "yaml-repo"
        assert merged.debug_logging is True

    def test_empty_variable_ignored(self) -> None:
        base = Settings(github=GitHubConfig(owner="kept"))
        assert base.with_env({"GITHUB_OWNER": ""}).github.owner == "kept"


class TestLoad:
    @pytest.fixture(autouse=True)
    def _clean_env(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        # setenv + delenv so monkeypatch restores anything load_dotenv adds
        for var in ("GITHUB_TOKEN", "GITHUB_OWNER", "GITHUB_REPO", "GITHUB_API_URL", "DEBUG_LOGGING"):
            monkeypatch.setenv(var, "placeholder")
            monkeypatch.delenv(var)
        monkeypatch.chdir(tmp_path)

    def test_dotenv_from_working_directory(self, tmp_path: Path) -> None:
        (tmp_path / ".env").write_text("GITHUB_TOKEN=from-dotenv\nGITHUB_REPO=dotenv-repo\n")

        settings = Settings.load()

        assert settings.github.token == "from-dotenv"
        assert settings.github.repo == "dotenv-repo"

    def test_real_environment_wins_over_dotenv(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        (tmp_path / ".env").write_text("GITHUB_TOKEN=from-dotenv\n")
        monkeypatch.setenv("GITHUB_TOKEN", "from-env")

        assert Settings.load().github.token == "from-env"

    def test_yaml_then_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "settings.yaml"
        path.write_text("github:\n  owner: yaml-owner\n  repo: yaml-repo\n")
        monkeypatch.setenv("GITHUB_REPO", "env-repo")

        settings = Settings.load(path)

        assert settings.github.owner == "yaml-owner"
        assert settings.github.repo == "env-repo"

    def test_explicit_env_file(self, tmp_path: Path) -> None:
        env_file = tmp_path / "custom.env"
        env_file.write_text("GITHUB_OWNER=custom-owner\n")

        assert Settings.load(env_file=env_file).github.owner == "custom-owner"

    def test_no_dotenv_is_fine(self) -> None:
        assert "GITHUB_TOKEN" not in os.environ
        assert Settings.load().github.token == ""
