# src/seqcheck/core/config.py
"""
Configuration schema and loading for seqcheck runs.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction.
"""

import re
from pathlib import Path
from typing import Any, Literal
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from pydantic import BaseModel, Field, model_validator
from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import ArgumentError

IsolationLevel = Literal["SERIALIZABLE", "REPEATABLE READ", "READ COMMITTED", "AUTOCOMMIT"]


class TLSSettings(BaseModel):
    """Client certificate configuration for secure clusters.

    When disabled the cluster is assumed to run in insecure mode, which
    also keeps the wire traffic readable for packet captures.
    """

    model_config = {"frozen": True}

    enabled: bool = Field(default=False, description="Connect with client certificates")
    client_cert: str = Field(default="certs/node.client.crt", description="Client certificate path")
    client_key: str = Field(default="certs/node.client.key", description="Client private key path")
    ca_cert: str = Field(default="certs/ca.crt", description="Cluster CA certificate path")


class DatabaseSettings(BaseModel):
    """Database connection configuration.

    The URL is a template: "{node}" is replaced with the node a client is
    bound to, so one setting covers every node of a cluster. A URL without
    the placeholder points every client at the same server.

    Example YAML:
        database:
          url: "cockroachdb+psycopg://root@{node}:26257/jepsen?sslmode=disable"
          isolation_level: SERIALIZABLE
    """

    model_config = {"frozen": True}

    # NOTE: str, not Path - Path mangles "scheme://host" URLs
    url: str = Field(
        default="cockroachdb+psycopg://root@{node}:26257/jepsen?sslmode=disable",
        description="SQLAlchemy URL template; {node} is substituted per client",
    )
    isolation_level: IsolationLevel = Field(
        default="SERIALIZABLE",
        description="Isolation level for every test transaction",
    )
    echo: bool = Field(default=False, description="Echo SQL statements")
    connect_timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        description="How long setup waits for a node to accept queries",
    )
    tls: TLSSettings = Field(default_factory=TLSSettings, description="Client certificate settings")

    def url_for(self, node: str) -> str:
        """Render the URL for one node, adding TLS parameters when enabled."""
        url = self.url.replace("{node}", node)
        if not self.tls.enabled:
            return url
        parts = urlsplit(url)
        query = dict(parse_qsl(parts.query))
        query.update(
            {
                "sslmode": "verify-full",
                "sslcert": self.tls.client_cert,
                "sslkey": self.tls.client_key,
                "sslrootcert": self.tls.ca_cert,
            }
        )
        return urlunsplit(parts._replace(query=urlencode(query)))


class RetrySettings(BaseModel):
    """Serialization-conflict retry configuration."""

    model_config = {"frozen": True}

    max_retries: int = Field(default=30, ge=0, description="Retries after the first attempt")
    initial_backoff_seconds: float = Field(default=0.02, ge=0, description="Delay before the first retry")
    backoff_factor: float = Field(default=4.0, gt=1.0, description="Mean multiplier applied per retry")
    jitter: float = Field(default=0.5, ge=0, description="Width of the uniform band around backoff_factor")
    max_backoff_seconds: float | None = Field(default=None, gt=0, description="Optional cap on a single delay")

    @model_validator(mode="after")
    def validate_jitter_band(self) -> "RetrySettings":
        if self.jitter / 2 >= self.backoff_factor:
            raise ValueError("jitter band must keep every backoff multiplier positive")
        return self


class ExecutorSettings(BaseModel):
    """Per-operation deadline and retry configuration."""

    model_config = {"frozen": True}

    timeout_seconds: float = Field(default=10.0, gt=0, description="Deadline for a whole call, retries included")
    retry: RetrySettings = Field(default_factory=RetrySettings, description="Conflict retry behaviour")


class WorkloadSettings(BaseModel):
    """Shape of the sequential workload."""

    model_config = {"frozen": True}

    key_count: int = Field(default=5, gt=0, description="Sub-keys per logical key")
    table_count: int = Field(default=10, gt=0, description="Shard tables keys are spread over")
    writers: int = Field(default=30, gt=0, description="Processes that only write")
    concurrency: int = Field(default=90, gt=0, description="Total client processes")

    @model_validator(mode="after")
    def validate_writers_leave_readers(self) -> "WorkloadSettings":
        if self.writers >= self.concurrency:
            raise ValueError(f"writers ({self.writers}) must be fewer than concurrency ({self.concurrency})")
        return self

    @property
    def window_size(self) -> int:
        """Size of the last-written window: two entries per writer."""
        return 2 * self.writers


class SeqcheckSettings(BaseModel):
    """Top-level seqcheck configuration.

    All settings are validated and frozen after construction.
    """

    model_config = {"frozen": True}

    database: DatabaseSettings = Field(default_factory=DatabaseSettings, description="Database connection")
    executor: ExecutorSettings = Field(default_factory=ExecutorSettings, description="Operation executor")
    workload: WorkloadSettings = Field(default_factory=WorkloadSettings, description="Sequential workload")


# Regex pattern for ${VAR} or ${VAR:-default} syntax
_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")


def _expand_env_vars(config: dict[str, Any]) -> dict[str, Any]:
    """Recursively expand ${VAR} and ${VAR:-default} patterns in config values."""
    import os

    def _expand_string(value: str) -> str:
        def replacer(match: re.Match[str]) -> str:
            env_value = os.environ.get(match.group(1))
            if env_value is not None:
                return env_value
            default = match.group(2)
            if default is not None:
                return default
            # Unset and no default: keep the literal so validation reports it
            return match.group(0)

        return _ENV_VAR_PATTERN.sub(replacer, value)

    def _expand_value(value: Any) -> Any:
        if isinstance(value, str):
            return _expand_string(value)
        elif isinstance(value, dict):
            return {k: _expand_value(v) for k, v in value.items()}
        elif isinstance(value, list):
            return [_expand_value(item) for item in value]
        else:
            return value

    return {k: _expand_value(v) for k, v in config.items()}


def _lower_keys(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(k).lower(): _lower_keys(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_lower_keys(item) for item in value]
    return value


def load_settings(config_path: Path) -> SeqcheckSettings:
    """Load settings from a YAML file with environment variable overrides.

    Precedence:
    1. Environment variables (SEQCHECK_*) - highest priority
    2. Config file
    3. Defaults from the Pydantic schema - lowest priority

    Environment variable format: SEQCHECK_EXECUTOR__TIMEOUT_SECONDS=5 for
    nested keys.

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If config file doesn't exist
    """
    from dynaconf import Dynaconf

    # Dynaconf silently accepts missing files
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="SEQCHECK",
        settings_files=[str(config_path)],
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = {k: v for k, v in dynaconf_settings.as_dict().items() if k not in internal_keys}
    raw_config = _lower_keys(raw_config)
    raw_config = _expand_env_vars(raw_config)

    return SeqcheckSettings(**raw_config)


def _sanitize_url(url: str) -> str:
    """Remove the password from a database URL template.

    The {node} placeholder parses as a plain host name and survives the
    round trip. Strings that are not SQLAlchemy URLs are returned as-is.

    Example:
        >>> _sanitize_url("postgresql://app:secret@{node}:5432/jepsen")
        "postgresql://app@{node}:5432/jepsen"
    """
    try:
        parsed = make_url(url)
    except ArgumentError:
        return url

    if parsed.password is None:
        return url

    # URL.set(password=None) would render "***"; rebuild without it instead
    sanitized = URL.create(
        drivername=parsed.drivername,
        username=parsed.username,
        password=None,
        host=parsed.host,
        port=parsed.port,
        database=parsed.database,
        query=parsed.query,
    )
    return sanitized.render_as_string(hide_password=False)


def resolve_config(settings: SeqcheckSettings) -> dict[str, Any]:
    """Convert validated settings to a dict for display.

    The database password and the client key path are redacted;
    certificate paths are kept.
    """
    config_dict = settings.model_dump(mode="json")
    config_dict["database"]["url"] = _sanitize_url(settings.database.url)
    config_dict["database"]["tls"]["client_key"] = "<redacted>"
    return config_dict
