"""Configuration management for benchwatch.

This module provides the per-invocation benchmark configuration, loaded
from YAML, and process settings loaded from environment variables using
pydantic-settings.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing_extensions import Self

from benchwatch.core.exceptions import ConfigurationError
from benchwatch.core.ordering import ToolType


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings can be configured via environment variables with
    the BENCHWATCH_ prefix.

    Attributes:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
        github_api_url: Base URL of the GitHub REST API.
        github_token: Fallback token when the config does not set one.
        timeout_seconds: Timeout for HTTP requests.

    Environment Variables:
        BENCHWATCH_LOG_LEVEL: Logging level (default: INFO)
        BENCHWATCH_GITHUB_API_URL: API URL (default: https://api.github.com)
        BENCHWATCH_GITHUB_TOKEN: GitHub token (optional)
        BENCHWATCH_TIMEOUT_SECONDS: Timeout in seconds (default: 30.0)
    """

    model_config = SettingsConfigDict(
        env_prefix="BENCHWATCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    github_api_url: str = Field(
        default="https://api.github.com",
        description="Base URL of the GitHub REST API",
    )
    github_token: str | None = Field(
        default=None,
        description="GitHub token used when the benchmark config has none",
    )
    timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout for HTTP requests in seconds",
    )


class BenchmarkConfig(BaseModel):
    """Configuration for recording one benchmark run.

    Attributes:
        name: Suite name the run is recorded under.
        tool: Benchmark tool that produced the run.
        gh_pages_branch: Branch holding the shared history.
        benchmark_data_dir_path: Directory of data.js on that branch.
        github_token: Token for pushing and commenting.
        auto_push: Push the generated commit to the remote branch.
        skip_fetch_gh_pages: Do not fetch or pull the branch before writing.
        comment_always: Comment the comparison on every run.
        comment_on_alert: Comment when an alert is raised.
        alert_threshold: Ratio above which an alert is raised.
        fail_on_alert: Fail when an alert exceeds the failure threshold.
        fail_threshold: Ratio above which an alert fails the run.
        alert_comment_cc_users: Accounts mentioned in alert comments.
        external_data_json_path: Local JSON file used instead of the branch.
        save_data_file: Write the local JSON file after appending.
        max_items_in_chart: Maximum runs kept per suite (None = unlimited).
        compare_with_best: Compare against the best run instead of the previous one.
        comment_footer: Extra text placed above the comment footer.

    Example:
        >>> config = BenchmarkConfig(tool=ToolType.CARGO, alert_threshold=1.5, fail_threshold=2.0)
        >>> config.fail_threshold
        2.0
    """

    model_config = {"frozen": True}

    name: str = Field(default="Benchmark", min_length=1, description="Suite name")
    tool: ToolType = Field(..., description="Benchmark tool")
    gh_pages_branch: str = Field(default="gh-pages", min_length=1, description="History branch")
    benchmark_data_dir_path: str = Field(default="dev/bench", description="Data directory on the branch")
    github_token: str | None = Field(default=None, description="GitHub token")
    auto_push: bool = Field(default=False, description="Push the history commit")
    skip_fetch_gh_pages: bool = Field(default=False, description="Skip fetching the history branch")
    comment_always: bool = Field(default=False, description="Always comment the comparison")
    comment_on_alert: bool = Field(default=False, description="Comment when an alert is raised")
    alert_threshold: float = Field(default=2.0, ge=0, description="Alert ratio threshold")
    fail_on_alert: bool = Field(default=False, description="Fail when alerts exceed fail threshold")
    fail_threshold: float = Field(default=2.0, ge=0, description="Failure ratio threshold")
    alert_comment_cc_users: list[str] = Field(default_factory=list, description="Users to mention")
    external_data_json_path: str | None = Field(default=None, description="Local data file path")
    save_data_file: bool = Field(default=True, description="Save the local data file")
    max_items_in_chart: int | None = Field(default=None, ge=1, description="Maximum runs per suite")
    compare_with_best: bool = Field(default=False, description="Compare with best run")
    comment_footer: str | None = Field(default=None, description="Custom comment footer")

    @model_validator(mode="before")
    @classmethod
    def _default_fail_threshold(cls, data: Any) -> Any:
        """Use the alert threshold as failure threshold when none is given."""
        if isinstance(data, dict) and data.get("fail_threshold") is None:
            data = dict(data)
            data["fail_threshold"] = data.get("alert_threshold", 2.0)
        return data

    @field_validator("alert_comment_cc_users")
    @classmethod
    def _mention_prefix(cls, users: list[str]) -> list[str]:
        """Normalize accounts to start with '@'."""
        normalized = []
        for user in users:
            user = user.strip()
            if not user:
                continue
            normalized.append(user if user.startswith("@") else f"@{user}")
        return normalized

    @model_validator(mode="after")
    def _check_consistency(self) -> Self:
        """Validate cross-field constraints."""
        if self.fail_threshold < self.alert_threshold:
            msg = (
                f"'alert-threshold' value must be smaller than 'fail-threshold' value "
                f"but got {self.alert_threshold} > {self.fail_threshold}"
            )
            raise ValueError(msg)
        if self.auto_push and not self.github_token:
            raise ValueError("'auto-push' is enabled but 'github-token' is not set")
        return self

    @property
    def data_js_path(self) -> Path:
        """Path of the history script on the shared branch."""
        return Path(self.benchmark_data_dir_path) / "data.js"

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> BenchmarkConfig:
        """Create a config from a mapping of action-style inputs.

        Keys may use hyphens (``fail-threshold``) or underscores.

        Args:
            data: Mapping of configuration keys to values.

        Returns:
            Validated BenchmarkConfig.

        Raises:
            ConfigurationError: If the configuration is invalid.
        """
        normalized = {str(key).replace("-", "_"): value for key, value in data.items()}
        try:
            return cls(**normalized)
        except ValidationError as e:
            msg = f"Invalid benchmark configuration: {e}"
            raise ConfigurationError(msg) from e

    @classmethod
    def from_yaml(cls, path: Path | str, overrides: dict[str, Any] | None = None) -> BenchmarkConfig:
        """Load benchmark configuration from a YAML file.

        The options may sit at the top level or under a ``benchmark`` key.

        Args:
            path: Path to the YAML configuration file.
            overrides: Values taking precedence over the file's content.

        Returns:
            BenchmarkConfig loaded from the file.

        Raises:
            ConfigurationError: If the file is missing or the configuration is invalid.
        """
        import yaml

        path = Path(path)
        if not path.exists():
            msg = f"Configuration file not found: {path}"
            raise ConfigurationError(msg)

        try:
            data = yaml.safe_load(path.read_text())
        except yaml.YAMLError as e:
            msg = f"Invalid YAML in {path}: {e}"
            raise ConfigurationError(msg) from e

        data = data or {}
        if not isinstance(data, dict):
            msg = f"Configuration in {path} must be a mapping"
            raise ConfigurationError(msg)

        section = data.get("benchmark", data)
        merged = {**section, **{k: v for k, v in (overrides or {}).items() if v is not None}}
        return cls.from_mapping(merged)
