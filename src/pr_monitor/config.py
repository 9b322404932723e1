"""Configuration management."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml


@dataclass
class GitHubConfig:
    """GitHub API settings."""
    endpoint: str = "https://api.github.com/graphql"
    login: Optional[str] = None
    timeout: float = 30.0
    page_size: int = 50


@dataclass
class RetryConfig:
    """Retry settings for GitHub calls."""
    max_attempts: int = 3
    initial_delay: float = 1.0
    max_delay: float = 5.0
    jitter: float = 2.0


@dataclass
class PollingConfig:
    """Polling intervals in seconds."""
    list_interval: float = 60.0
    detail_interval: float = 30.0


@dataclass
class PathsConfig:
    """Path settings."""
    state_dir: Path = Path("state")


@dataclass
class NotificationsConfig:
    """Notification sinks."""
    desktop: bool = True
    slack_webhook_url: Optional[str] = None


@dataclass
class LoggingConfig:
    """Logging settings."""
    level: str = "INFO"
    json: bool = False


@dataclass
class Settings:
    """Application settings."""

    # API Keys (from environment only)
    github_token: Optional[str] = None

    # Config sections
    github: GitHubConfig = field(default_factory=GitHubConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)
    polling: PollingConfig = field(default_factory=PollingConfig)
    paths: PathsConfig = field(default_factory=PathsConfig)
    notifications: NotificationsConfig = field(default_factory=NotificationsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def state_dir(self) -> Path:
        return self.paths.state_dir

    @property
    def slack_webhook_url(self) -> Optional[str]:
        return self.notifications.slack_webhook_url


def load_config(config_path: Path = Path("config.yaml")) -> dict:
    """Load configuration from YAML file."""
    if not config_path.exists():
        return {}

    with open(config_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _apply_section(section: object, values: dict) -> None:
    for key, value in values.items():
        if not hasattr(section, key):
            raise ValueError(f"Unknown setting {type(section).__name__}.{key}")
        setattr(section, key, value)


def get_settings(config_path: Path = Path("config.yaml")) -> Settings:
    """Get application settings from YAML config and environment."""
    config = load_config(config_path)

    settings = Settings(github_token=os.getenv("GITHUB_TOKEN"))

    if "github" in config:
        _apply_section(settings.github, config["github"])

    if "retry" in config:
        _apply_section(settings.retry, config["retry"])

    if "polling" in config:
        _apply_section(settings.polling, config["polling"])

    if "paths" in config:
        for key, value in config["paths"].items():
            _apply_section(settings.paths, {key: Path(value)})

    if "notifications" in config:
        _apply_section(settings.notifications, config["notifications"])

    if "logging" in config:
        _apply_section(settings.logging, config["logging"])

    # Secrets from the environment win over the file
    slack_webhook_url = os.getenv("SLACK_WEBHOOK_URL")
    if slack_webhook_url:
        settings.notifications.slack_webhook_url = slack_webhook_url

    github_login = os.getenv("GITHUB_LOGIN")
    if github_login:
        settings.github.login = github_login

    return settings
