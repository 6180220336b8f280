"""YTViewer settings: a YAML file with ${VAR} placeholders, or plain env vars."""

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

# ${NAME} first, then bare $NAME
_BRACED_VAR_RE = re.compile(r'\$\{([^}]+)\}')
_BARE_VAR_RE = re.compile(r'\$([A-Za-z_][A-Za-z0-9_]*)')

DEFAULT_CONFIG_FILES = ("config.yaml", "config.yml")


def _env_lookup(match: re.Match) -> str:
    return os.environ.get(match.group(1), "")


def expand_env_vars(value: Any) -> Any:
    """Substitute ``${VAR}`` / ``$VAR`` in every string of a parsed YAML tree.

    Unset variables become empty strings.
    """
    if isinstance(value, str):
        return _BARE_VAR_RE.sub(_env_lookup, _BRACED_VAR_RE.sub(_env_lookup, value))
    if isinstance(value, dict):
        return {key: expand_env_vars(item) for key, item in value.items()}
    if isinstance(value, list):
        return [expand_env_vars(item) for item in value]
    return value


@dataclass
class WebConfig:
    """Web server configuration."""
    host: str = "0.0.0.0"
    port: int = 3000
    password: str = ""  # empty = no auth required
    session_secret: str = ""  # auto-generated if not set
    session_max_age: int = 60 * 60 * 24 * 30  # seconds (30 days)


@dataclass
class NocoDBConfig:
    """NocoDB connection configuration."""
    url: str = ""
    token: str = ""
    project_id: str = ""
    table_id: str = ""
    table_name: str = "youtubeTranscripts"
    timeout: int = 15  # seconds per request
    cache_ttl: int = 300  # seconds a fetched page stays cached

    def __post_init__(self):
        self.url = self.url.rstrip("/")


@dataclass
class Config:
    """Main configuration container."""
    web: WebConfig = field(default_factory=WebConfig)
    nocodb: NocoDBConfig = field(default_factory=NocoDBConfig)

    @classmethod
    def from_yaml(cls, path: Path | str) -> "Config":
        """Parse a YAML settings file; unknown sections are ignored."""
        with open(Path(path), "r") as f:
            data = expand_env_vars(yaml.safe_load(f) or {})
        return cls(
            web=WebConfig(**(data.get("web") or {})),
            nocodb=NocoDBConfig(**(data.get("nocodb") or {})),
        )

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration directly from environment variables."""
        return cls(
            web=WebConfig(
                host=os.environ.get("YTV_WEB_HOST", "0.0.0.0"),
                port=int(os.environ.get("YTV_WEB_PORT", "3000")),
                password=os.environ.get("YTV_PASSWORD", os.environ.get("APP_PASSWORD", "")),
                session_secret=os.environ.get("YTV_SESSION_SECRET", ""),
                session_max_age=int(os.environ.get("YTV_SESSION_MAX_AGE", str(60 * 60 * 24 * 30))),
            ),
            nocodb=NocoDBConfig(
                url=os.environ.get("NC_URL", ""),
                token=os.environ.get("NC_TOKEN", ""),
                project_id=os.environ.get("NOCODB_PROJECT_ID", ""),
                table_id=os.environ.get("NOCODB_TABLE_ID", ""),
                table_name=os.environ.get("NOCODB_TABLE_NAME", "youtubeTranscripts"),
                timeout=int(os.environ.get("YTV_NOCODB_TIMEOUT", "15")),
                cache_ttl=int(os.environ.get("YTV_CACHE_TTL", "300")),
            ),
        )


def load_config(config_path: str | None = None) -> Config:
    """Settings from ``config_path``, else ./config.yaml or ./config.yml, else the environment.

    An explicit path that does not exist is an error. Incomplete settings
    only produce warnings.
    """
    if config_path:
        if not Path(config_path).exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        config = Config.from_yaml(config_path)
    else:
        found = next((Path(p) for p in DEFAULT_CONFIG_FILES if Path(p).exists()), None)
        config = Config.from_yaml(found) if found else Config.from_env()

    if not config.nocodb.url or not config.nocodb.token:
        logger.warning("nocodb.url / nocodb.token not set, video endpoints will fail")
    if not config.nocodb.table_id and not config.nocodb.table_name:
        logger.warning("neither nocodb.table_id nor nocodb.table_name is set")
    if not config.web.password:
        logger.warning("web.password is empty, the catalog is not password protected")

    return config
