"""Configuration for the discovery telegraf sink.

Provides strongly-typed settings using Pydantic and a loader from
``DISCOVERY_*`` environment variables with defaults suitable for local
development.
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from discovery.services.sink import (
    TelegrafCertOptions,
    TelegrafDNSOptions,
    TelegrafHTTPOptions,
    TelegrafOptions,
    TelegrafSignalOptions,
    TelegrafTCPOptions,
)

ENV_PREFIX = "DISCOVERY"


class Settings(BaseModel):
    """Pydantic settings for the sink service."""
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8080
    telegraf: TelegrafOptions = Field(default_factory=TelegrafOptions)


def _env(name: str, default: str = "") -> str:
    return os.getenv(f"{ENV_PREFIX}_{name}", default)


def _env_expand(name: str, default: str = "") -> str:
    """Value with $VAR references expanded from the environment."""
    return os.path.expandvars(_env(name, default))


def _env_content(name: str, default: str = "") -> str:
    """Like _env_expand, but a value naming an existing file yields its content."""
    value = _env(name, default)
    if value and "\n" not in value:
        path = Path(value)
        try:
            if path.is_file():
                value = path.read_text(encoding="utf-8")
        except OSError:
            return default
    return os.path.expandvars(value)


def _env_bool(name: str, default: bool = False) -> bool:
    value = _env(name)
    if not value:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: str = "") -> list[str]:
    return [s.strip() for s in _env_expand(name, default).split(",") if s.strip()]


def load_settings() -> Settings:
    """Load settings from environment variables and return a Settings object."""
    try:
        return Settings(
            log_level=_env("LOG_LEVEL", "INFO"),
            host=_env("HOST", "0.0.0.0"),
            port=int(_env("PORT", "8080")),
            telegraf=TelegrafOptions(
                checksum=_env_bool("TELEGRAF_CHECKSUM"),
                signal=TelegrafSignalOptions(
                    template=_env_expand("SIGNAL_TELEGRAF_TEMPLATE"),
                    tags=_env_content("SIGNAL_TELEGRAF_TAGS"),
                    url=_env_expand("SIGNAL_TELEGRAF_URL"),
                    user=_env_expand("SIGNAL_TELEGRAF_USER"),
                    password=_env_expand("SIGNAL_TELEGRAF_PASSWORD"),
                    version=_env("SIGNAL_TELEGRAF_VERSION", "v1"),
                    params=_env("SIGNAL_TELEGRAF_PARAMS"),
                    interval=_env("SIGNAL_TELEGRAF_INTERVAL", "10s"),
                    timeout=_env("SIGNAL_TELEGRAF_TIMEOUT", "5s"),
                    duration=_env("SIGNAL_TELEGRAF_DURATION"),
                    prefix=_env("SIGNAL_TELEGRAF_PREFIX"),
                    quality_name=_env("SIGNAL_TELEGRAF_QUALITY_NAME", "quality"),
                    quality_range=_env("SIGNAL_TELEGRAF_QUALITY_RANGE", "5m"),
                    quality_every=_env("SIGNAL_TELEGRAF_QUALITY_EVERY", "15s"),
                    quality_points=int(_env("SIGNAL_TELEGRAF_QUALITY_POINTS", "20")),
                    quality_query=_env_content("SIGNAL_TELEGRAF_QUALITY_QUERY"),
                    availability_name=_env("SIGNAL_TELEGRAF_AVAILABILITY_NAME", "availability"),
                    metric_name=_env("SIGNAL_TELEGRAF_METRIC_NAME", "metric"),
                    default_tags=_env_list("SIGNAL_TELEGRAF_DEFAULT_TAGS"),
                    var_format=_env("SIGNAL_TELEGRAF_VAR_FORMAT", "$%s"),
                ),
                dns=TelegrafDNSOptions(
                    conf=_env_expand("DNS_TELEGRAF_CONF"),
                    template=_env_content("DNS_TELEGRAF_TEMPLATE"),
                    interval=_env("DNS_TELEGRAF_INTERVAL", "10s"),
                    servers=_env("DNS_TELEGRAF_SERVERS"),
                    network=_env("DNS_TELEGRAF_NETWORK", "udp"),
                    record_type=_env("DNS_TELEGRAF_RECORD_TYPE", "A"),
                    port=int(_env("DNS_TELEGRAF_PORT", "53")),
                    timeout=int(_env("DNS_TELEGRAF_TIMEOUT", "2")),
                    tags=_env_list("DNS_TELEGRAF_TAGS"),
                ),
                http=TelegrafHTTPOptions(
                    conf=_env_expand("HTTP_TELEGRAF_CONF"),
                    template=_env_content("HTTP_TELEGRAF_TEMPLATE"),
                    interval=_env("HTTP_TELEGRAF_INTERVAL", "10s"),
                    method=_env("HTTP_TELEGRAF_METHOD", "GET"),
                    follow_redirects=_env_bool("HTTP_TELEGRAF_FOLLOW_REDIRECTS"),
                    string_match=_env("HTTP_TELEGRAF_STRING_MATCH"),
                    status_code=int(_env("HTTP_TELEGRAF_STATUS_CODE", "0")),
                    timeout=_env("HTTP_TELEGRAF_TIMEOUT", "5s"),
                    tags=_env_list("HTTP_TELEGRAF_TAGS"),
                ),
                tcp=TelegrafTCPOptions(
                    conf=_env_expand("TCP_TELEGRAF_CONF"),
                    template=_env_content("TCP_TELEGRAF_TEMPLATE"),
                    interval=_env("TCP_TELEGRAF_INTERVAL", "10s"),
                    timeout=_env("TCP_TELEGRAF_TIMEOUT", "5s"),
                    read_timeout=_env("TCP_TELEGRAF_READ_TIMEOUT", "3s"),
                    send=_env("TCP_TELEGRAF_SEND"),
                    expect=_env("TCP_TELEGRAF_EXPECT"),
                    tags=_env_list("TCP_TELEGRAF_TAGS"),
                ),
                cert=TelegrafCertOptions(
                    conf=_env_expand("CERT_TELEGRAF_CONF"),
                    template=_env_content("CERT_TELEGRAF_TEMPLATE"),
                    interval=_env("CERT_TELEGRAF_INTERVAL", "10s"),
                    timeout=_env("CERT_TELEGRAF_TIMEOUT", "5s"),
                    server_name=_env("CERT_TELEGRAF_SERVER_NAME"),
                    exclude_root_certs=_env_bool("CERT_TELEGRAF_EXCLUDE_ROOT_CERTS"),
                    tls_ca=_env_expand("CERT_TELEGRAF_TLS_CA"),
                    tls_cert=_env_expand("CERT_TELEGRAF_TLS_CERT"),
                    tls_key=_env_expand("CERT_TELEGRAF_TLS_KEY"),
                    tls_server_name=_env("CERT_TELEGRAF_TLS_SERVER_NAME"),
                    use_proxy=_env_bool("CERT_TELEGRAF_USE_PROXY"),
                    proxy_url=_env_expand("CERT_TELEGRAF_PROXY_URL"),
                    tags=_env_list("CERT_TELEGRAF_TAGS"),
                ),
            ),
        )
    except (ValidationError, ValueError) as e:
        raise RuntimeError(f"Invalid configuration: {e}") from e
