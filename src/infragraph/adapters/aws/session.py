"""boto3 session construction for one AWS provider block and region."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Any

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from infragraph.domain.errors import ProviderConnectionError

if TYPE_CHECKING:
    from infragraph.config import AwsConfig
    from infragraph.domain.model import AWSSpec
    from infragraph.domain.scraping import ScrapeContext

log = getLogger(__name__)

ROLE_SESSION_NAME = "infragraph"

type SessionFactory = Callable[..., boto3.Session]


@dataclass(frozen=True, slots=True)
class StaticCredentials:
    access_key: str
    secret_key: str

    def __repr__(self) -> str:
        return f"StaticCredentials(access_key={self.access_key!r})"


def resolve_credentials(ctx: ScrapeContext, spec: AWSSpec) -> StaticCredentials | None:
    """Static keys from the named connection or placeholders; ``None`` defers to the default chain.

    The access key and the secret key are resolved independently.
    """

    if spec.connection:
        connection = ctx.hydrate_connection(spec.connection)
        if not connection.username:
            return None
        return StaticCredentials(connection.username, connection.password)
    if spec.access_key.is_empty():
        return None
    access_key = ctx.get_env_value(spec.access_key, label="access key")
    secret_key = ctx.get_env_value(spec.secret_key, label="secret key")
    return StaticCredentials(access_key, secret_key)


def _trace_call(http_response: Any, model: Any, **_: Any) -> None:  # noqa: ANN401
    log.debug(
        "%s.%s -> %s",
        model.service_model.service_name,
        model.name,
        getattr(http_response, "status_code", "?"),
    )


@dataclass(frozen=True, slots=True)
class AwsSession:
    """A region-bound session plus the client options every service client shares."""

    session: boto3.Session
    region: str
    client_config: BotoConfig
    endpoint_url: str | None = None
    verify: bool = True

    def client(self, service: str) -> Any:  # noqa: ANN401
        return self.session.client(
            service,
            region_name=self.region,
            endpoint_url=self.endpoint_url,
            verify=self.verify,
            config=self.client_config,
        )

    def caller_identity(self) -> dict[str, Any]:
        try:
            identity = self.client("sts").get_caller_identity()
        except (BotoCoreError, ClientError) as exc:
            raise ProviderConnectionError(f"failed to get AWS caller identity: {exc}") from exc
        identity.pop("ResponseMetadata", None)
        return identity


def new_session(
    ctx: ScrapeContext,
    spec: AWSSpec,
    region: str,
    config: AwsConfig,
    *,
    session_factory: SessionFactory = boto3.Session,
) -> AwsSession:
    """Build the session; blocking when a role must be assumed."""

    credentials = resolve_credentials(ctx, spec)
    kwargs: dict[str, str] = {"region_name": region}
    if credentials is not None:
        kwargs["aws_access_key_id"] = credentials.access_key
        kwargs["aws_secret_access_key"] = credentials.secret_key
    try:
        session = session_factory(**kwargs)
    except BotoCoreError as exc:
        raise ProviderConnectionError(f"failed to create AWS session: {exc}") from exc

    client_config = BotoConfig(
        retries={"max_attempts": config.max_attempts, "mode": "standard"},
        connect_timeout=config.connect_timeout_seconds,
        read_timeout=config.read_timeout_seconds,
    )
    aws = AwsSession(
        session=session,
        region=region,
        client_config=client_config,
        endpoint_url=spec.endpoint or None,
        verify=not spec.skip_tls_verify,
    )

    if spec.assume_role:
        try:
            assumed = aws.client("sts").assume_role(
                RoleArn=spec.assume_role, RoleSessionName=ROLE_SESSION_NAME
            )
        except (BotoCoreError, ClientError) as exc:
            raise ProviderConnectionError(
                f"failed to assume role {spec.assume_role}: {exc}"
            ) from exc
        temporary = assumed["Credentials"]
        session = session_factory(
            region_name=region,
            aws_access_key_id=temporary["AccessKeyId"],
            aws_secret_access_key=temporary["SecretAccessKey"],
            aws_session_token=temporary["SessionToken"],
        )
        aws = AwsSession(
            session=session,
            region=region,
            client_config=client_config,
            endpoint_url=aws.endpoint_url,
            verify=aws.verify,
        )

    if ctx.trace:
        aws.session.events.register("after-call", _trace_call)
    return aws
