"""AWS client configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_float


@dataclass(frozen=True, slots=True)
class AwsConfig:
    max_attempts: int = 5
    connect_timeout_seconds: float = 10.0
    read_timeout_seconds: float = 60.0


def get_aws_config() -> AwsConfig:
    connect_timeout = env_float("AWS_CONNECT_TIMEOUT_SECONDS")
    read_timeout = env_float("AWS_READ_TIMEOUT_SECONDS")
    defaults = AwsConfig()
    return AwsConfig(
        connect_timeout_seconds=connect_timeout or defaults.connect_timeout_seconds,
        read_timeout_seconds=read_timeout or defaults.read_timeout_seconds,
    )
