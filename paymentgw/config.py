"""Application settings read from the environment and .env files."""

from __future__ import annotations

import json
import os
import re
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Mapping, Optional

from dotenv import dotenv_values

_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_DURATION_PART = r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)"
_DURATION_RE = re.compile(f"(?:{_DURATION_PART})+")
_DURATION_PART_RE = re.compile(_DURATION_PART)


def parse_services(value: str) -> dict[str, str]:
    """Parse ``NAME=address`` pairs separated by commas; names are upper-cased."""
    services: dict[str, str] = {}
    for pair in value.split(","):
        item = pair.strip()
        if not item:
            continue
        parts = item.split("=")
        if len(parts) != 2:
            raise ValueError(f"invalid service pair: {json.dumps(item)}")
        services[parts[0].upper()] = parts[1]
    return services


@dataclass
class RpcConfig:
    """Where the RPC server listens and where other services are reached."""

    host: str = "0.0.0.0"
    port: str = "9000"
    services: dict[str, str] = field(default_factory=dict)

    @property
    def address(self) -> str:
        return f"{self.host}{self.port}"

    def service(self, service: str) -> str:
        """The address of a named service, or this server's own address."""
        return self.services.get(service, self.address)


@dataclass
class WebConfig:
    """Where the web server listens."""

    host: str = "0.0.0.0"
    port: str = ":8080"

    @property
    def address(self) -> str:
        return f"{self.host}{self.port}"


@dataclass
class PGConfig:
    conn: str = ""


@dataclass
class NatsConfig:
    url: str = ""
    stream: str = "mallbots"


@dataclass
class OtelConfig:
    service_name: str = "mallbots"
    exporter_endpoint: str = "http://collector:4317"


@dataclass
class AppConfig:
    environment: str = ""
    log_level: str = "DEBUG"
    pg: PGConfig = field(default_factory=PGConfig)
    nats: NatsConfig = field(default_factory=NatsConfig)
    rpc: RpcConfig = field(default_factory=RpcConfig)
    web: WebConfig = field(default_factory=WebConfig)
    otel: OtelConfig = field(default_factory=OtelConfig)
    shutdown_timeout: timedelta = timedelta(seconds=30)


def _parse_duration(text: str) -> timedelta:
    s = text.strip()
    sign = 1
    if s[:1] in ("+", "-"):
        sign = -1 if s[0] == "-" else 1
        s = s[1:]
    if s == "0":
        return timedelta(0)
    if not s or not _DURATION_RE.fullmatch(s):
        raise ValueError(f"invalid duration {json.dumps(text)}")
    total = sum(float(number) * _DURATION_UNITS[unit] for number, unit in _DURATION_PART_RE.findall(s))
    return timedelta(seconds=sign * total)


def _environment_files(environment: str) -> list[Path]:
    if not environment:
        return [Path(".env.local"), Path(".env")]
    names = [f".env.{environment}.local"]
    if environment != "test":
        names.append(".env.local")
    names += [f".env.{environment}", ".env"]
    return [Path(name) for name in names]


def _lookup(
    env: Mapping[str, str],
    key: str,
    alt: Optional[str] = None,
    default: Optional[str] = None,
    required: bool = False,
) -> str:
    for name in (key, alt):
        if name and name in env:
            return env[name]
    if default is not None:
        return default
    if required:
        raise ValueError(f"required key {key} missing value")
    return ""


def init_config(environ: Optional[Mapping[str, str]] = None) -> AppConfig:
    """Read the settings from ``environ`` (the process environment by default).

    The .env files for the ``ENVIRONMENT`` in effect, in the working directory,
    fill in whatever the environment does not set.
    """
    env = dict(os.environ if environ is None else environ)
    for path in _environment_files(env.get("ENVIRONMENT", "")):
        if path.is_file():
            for key, value in dotenv_values(path).items():
                if value is not None:
                    env.setdefault(key, value)

    return AppConfig(
        environment=_lookup(env, "ENVIRONMENT"),
        log_level=_lookup(env, "LOG_LEVEL", default="DEBUG"),
        pg=PGConfig(conn=_lookup(env, "PG_CONN", "CONN", required=True)),
        nats=NatsConfig(
            url=_lookup(env, "NATS_URL", "URL", required=True),
            stream=_lookup(env, "NATS_STREAM", "STREAM", default="mallbots"),
        ),
        rpc=RpcConfig(
            host=_lookup(env, "RPC_HOST", "HOST", default="0.0.0.0"),
            port=_lookup(env, "RPC_PORT", "PORT", default="9000"),
            services=parse_services(_lookup(env, "RPC_SERVICES", "SERVICES")),
        ),
        web=WebConfig(
            host=_lookup(env, "WEB_HOST", "HOST", default="0.0.0.0"),
            port=_lookup(env, "WEB_PORT", "PORT", default=":8080"),
        ),
        otel=OtelConfig(
            service_name=_lookup(env, "OTEL_SERVICE_NAME", "SERVICE_NAME", default="mallbots"),
            exporter_endpoint=_lookup(
                env, "OTEL_EXPORTER_OTLP_ENDPOINT", "EXPORTER_OTLP_ENDPOINT", default="http://collector:4317"
            ),
        ),
        shutdown_timeout=_parse_duration(_lookup(env, "SHUTDOWN_TIMEOUT", default="30s")),
    )