"""Configuration models and loaders (YAML file, environment, .env)."""

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field, field_validator

DEFAULT_OWNER = "your-username"
DEFAULT_REPO = "job-search-repo"


class GitHubConfig(BaseModel):
    """Target repository and credentials for issue creation."""

    owner: str = DEFAULT_OWNER
    repo: str = DEFAULT_REPO
    token: str = Field(default="", repr=False)
    api_url: str = "https://api.github.com"
    timeout_seconds: float = Field(default=10.0, gt=0)

    @field_validator("owner", "repo")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            msg = "owner and repo must not be empty"
            raise ValueError(msg)
        return v.strip()


class Settings(BaseModel):
    """Top-level settings."""

    github: GitHubConfig = Field(default_factory=GitHubConfig)
    debug_logging: bool = False

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(raw)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """Build settings from environment variables only."""
        return cls().with_env(environ)

    def with_env(self, environ: Mapping[str, str] | None = None) -> "Settings":
        """Return a copy with any set environment variables applied on top.

        Recognised: GITHUB_TOKEN, GITHUB_OWNER, GITHUB_REPO, GITHUB_API_URL,
        DEBUG_LOGGING ("true" enables).
        """
        env = os.environ if environ is None else environ
        github = self.github.model_dump()
        for key, var in (
            ("token", "GITHUB_TOKEN"),
            ("owner", "GITHUB_OWNER"),
            ("repo", "GITHUB_REPO"),
            ("api_url", "GITHUB_API_URL"),
        ):
            if env.get(var):
                github[key] = env[var]

        debug = self.debug_logging
        if "DEBUG_LOGGING" in env:
            debug = env["DEBUG_LOGGING"].strip().lower() == "true"

        return Settings(github=GitHubConfig.model_validate(github), debug_logging=debug)

    @classmethod
    def load(
        cls,
        config_path: str | Path | None = None,
        env_file: str | Path | None = None,
    ) -> "Settings":
        """Load .env, then the optional YAML file, then environment overrides.

        The .env file is searched from the working directory unless env_file
        is given. Variables already set in the environment win over it.
        """
        load_dotenv(env_file or find_dotenv(usecwd=True), override=False)
        base = cls.from_yaml(config_path) if config_path else cls()
        return base.with_env()
