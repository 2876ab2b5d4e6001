"""Pydantic configuration models with validation."""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import (
    AliasChoices,
    AliasPath,
    BaseModel,
    Field,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from resolvarr.domain.entities.resolution import HostKind

Environment = Literal["dev", "test", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class ResolverConfig(BaseModel):
    """Budgets and timeouts of the resolution engine.

    All values configurable via YAML (resolver section) or ENV vars.
    """

    hop_budget: int = Field(
        default=3,
        description="Maximum resolver hops per link (fan-out counts as one).",
    )
    max_concurrent: int = Field(
        default=8,
        description="Max links resolved in parallel per batch.",
    )
    resolve_timeout_seconds: float = Field(
        default=120.0,
        description="Wall-clock limit for one link. 0 = no limit.",
    )
    page_timeout_seconds: float = Field(
        default=15.0,
        description="Timeout for provider page fetches.",
    )
    api_timeout_seconds: float = Field(
        default=30.0,
        description="Timeout for metadata API calls.",
    )
    gate_timeout_seconds: float = Field(
        default=45.0,
        description="Timeout for each gated-redirect request.",
    )
    gate_poll_attempts: int = Field(
        default=5,
        description="Follow-up polls before a gate is abandoned.",
    )
    gate_poll_interval_seconds: float = Field(
        default=2.0,
        description="Pause between follow-up polls.",
    )
    gate_wait_padding_seconds: float = Field(
        default=3.0,
        description="Seconds added to the wait announced by the gate.",
    )
    probe_terminal_urls: bool = Field(
        default=False,
        description="HEAD-check terminal URLs and degrade unreachable results.",
    )
    probe_timeout_seconds: float = Field(
        default=8.0,
        description="Per-URL reachability probe timeout.",
    )
    gofile_token: Optional[str] = Field(
        default=None,
        description="GoFile account token. Unset = guest token per call.",
    )
    gofile_api_base: str = Field(
        default="https://api.gofile.io",
        description="GoFile API base URL.",
    )

    @field_validator("hop_budget", "max_concurrent", "gate_poll_attempts")
    @classmethod
    def _validate_positive_int(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be >= 1")
        return v

    @field_validator(
        "page_timeout_seconds",
        "api_timeout_seconds",
        "gate_timeout_seconds",
        "probe_timeout_seconds",
    )
    @classmethod
    def _validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeouts must be > 0")
        return v

    @field_validator(
        "resolve_timeout_seconds",
        "gate_poll_interval_seconds",
        "gate_wait_padding_seconds",
    )
    @classmethod
    def _validate_non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("must be >= 0")
        return v


class AppConfig(BaseModel):
    """
    Canonical application configuration (validated, final).

    Note:
    - YAML is expected to be sectioned (http/logging/resolver/hosts).
    - Environment variables are handled by EnvOverrides(BaseSettings) to allow strict
      precedence control (defaults < YAML < ENV < CLI) in load.py.
    """

    # General
    app_name: str = Field(default="resolvarr", description="Application name.")
    environment: Environment = Field(
        default="dev",
        description="Runtime environment (affects defaults like log format).",
    )

    # HTTP (YAML section: http.*)
    http_timeout_seconds: float = Field(
        default=30.0,
        validation_alias=AliasChoices(
            "http_timeout_seconds",
            AliasPath("http", "timeout_seconds"),
        ),
        description="Default timeout of the shared HTTP client.",
    )
    http_user_agent: str = Field(
        default=DEFAULT_USER_AGENT,
        validation_alias=AliasChoices(
            "http_user_agent",
            AliasPath("http", "user_agent"),
        ),
        description="User-Agent for outgoing HTTP requests.",
    )
    http_max_connections: int = Field(
        default=50,
        validation_alias=AliasChoices(
            "http_max_connections",
            AliasPath("http", "max_connections"),
        ),
        description="Connection pool limit of the shared HTTP client.",
    )

    # Logging (YAML section: logging.*)
    log_level: LogLevel = Field(
        default="INFO",
        validation_alias=AliasChoices(
            "log_level",
            AliasPath("logging", "level"),
        ),
        description="Log level.",
    )
    log_format: Optional[LogFormat] = Field(
        default=None,
        validation_alias=AliasChoices(
            "log_format",
            AliasPath("logging", "format"),
        ),
        description=(
            "Log renderer format (console/json). If unset, derived from environment."
        ),
    )

    # Resolution engine (YAML section: resolver.*)
    resolver: ResolverConfig = Field(default_factory=ResolverConfig)

    # Host family patterns (YAML section: hosts.<kind>: [substring, ...])
    hosts: dict[str, list[str]] = Field(
        default_factory=dict,
        description="Hostname substrings per host family.",
    )

    @field_validator("http_timeout_seconds")
    @classmethod
    def _validate_http_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("http_timeout_seconds must be > 0")
        return v

    @field_validator("http_max_connections")
    @classmethod
    def _validate_max_connections(cls, v: int) -> int:
        if v < 1:
            raise ValueError("http_max_connections must be >= 1")
        return v

    @field_validator("hosts")
    @classmethod
    def _validate_hosts(cls, v: dict[str, list[str]]) -> dict[str, list[str]]:
        known = {kind.value for kind in HostKind if kind is not HostKind.UNKNOWN}
        unknown = sorted(set(v) - known)
        if unknown:
            raise ValueError(f"unknown host families: {', '.join(unknown)}")
        return v

    @model_validator(mode="after")
    def _derive_defaults(self) -> "AppConfig":
        # Default log format: console in dev/test, json in prod.
        if self.log_format is None:
            self.log_format = "json" if self.environment == "prod" else "console"
        return self

    def to_sectioned_dict(self) -> dict[str, Any]:
        """
        Dump configuration in the sectioned shape used by config.yaml/docs.
        """
        return {
            "app_name": self.app_name,
            "environment": self.environment,
            "http": {
                "timeout_seconds": self.http_timeout_seconds,
                "user_agent": self.http_user_agent,
                "max_connections": self.http_max_connections,
            },
            "logging": {"level": self.log_level, "format": self.log_format},
            "resolver": self.resolver.model_dump(),
            "hosts": {kind: list(patterns) for kind, patterns in self.hosts.items()},
        }


class EnvOverrides(BaseSettings):
    """
    Environment-variable overrides (all optional).

    Intended usage:
    - load.py creates EnvOverrides() to read RESOLVARR_* variables,
      converts to dict of set values, merges into YAML/defaults,
      then validates AppConfig.

    Supported env var examples (flat, explicit):
    - RESOLVARR_HTTP_TIMEOUT_SECONDS
    - RESOLVARR_LOG_LEVEL
    - RESOLVARR_RESOLVER_HOP_BUDGET
    - RESOLVARR_RESOLVER_GOFILE_TOKEN
    """

    model_config = SettingsConfigDict(
        env_prefix="RESOLVARR_",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: Optional[str] = None
    environment: Optional[Environment] = None

    http_timeout_seconds: Optional[float] = None
    http_user_agent: Optional[str] = None
    http_max_connections: Optional[int] = None

    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None

    resolver_hop_budget: Optional[int] = None
    resolver_max_concurrent: Optional[int] = None
    resolver_resolve_timeout_seconds: Optional[float] = None
    resolver_page_timeout_seconds: Optional[float] = None
    resolver_api_timeout_seconds: Optional[float] = None
    resolver_gate_timeout_seconds: Optional[float] = None
    resolver_gate_poll_attempts: Optional[int] = None
    resolver_gate_poll_interval_seconds: Optional[float] = None
    resolver_gate_wait_padding_seconds: Optional[float] = None
    resolver_probe_terminal_urls: Optional[bool] = None
    resolver_gofile_token: Optional[str] = None
    resolver_gofile_api_base: Optional[str] = None

    def to_update_dict(self) -> dict[str, Any]:
        """
        Return only values that were actually provided (non-None), for merging.
        """
        return self.model_dump(exclude_none=True)
