"""Endpoint resolution and S3 client construction."""

from __future__ import annotations

from typing import Any, Mapping, Optional

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError

from s3deploy.core.exceptions import EndpointError
from s3deploy.core.models import EndpointConfig
from s3deploy.utils.logging import get_logger

logger = get_logger(__name__)

ENDPOINT_OVERRIDE_VAR = "AWS_S3_ENDPOINT"
DEFAULT_REGION = "eu-central-1"
DEFAULT_SERVICE_URL = "https://s3.eu-central-1.amazonaws.com"
S3_SERVICE_ID = "s3"

_CREDENTIAL_VARS = {
    "aws_access_key_id": "AWS_ACCESS_KEY_ID",
    "aws_secret_access_key": "AWS_SECRET_ACCESS_KEY",
    "aws_session_token": "AWS_SESSION_TOKEN",
}


def _normalize_url(url: str) -> str:
    """Bare hosts ("s3.example.com:9000") are treated as https."""
    url = url.strip()
    if "://" not in url:
        return f"https://{url}"
    return url


class EndpointResolver:
    """
    Decides where the S3 client talks to.

    The override variable, when set, replaces the default service URL.
    Path-style addressing is always forced so S3-compatible stores without
    wildcard DNS keep working.
    """

    def __init__(
        self,
        env: Mapping[str, str],
        default_region: str = DEFAULT_REGION,
        default_url: str = DEFAULT_SERVICE_URL,
    ):
        self.env = env
        self.default_region = default_region
        self.default_url = default_url

    def resolve(self) -> EndpointConfig:
        override = self.env.get(ENDPOINT_OVERRIDE_VAR)
        url = override if override else self.default_url
        return EndpointConfig(
            service_url=_normalize_url(url),
            signing_region=self.default_region,
            path_style_addressing=True,
        )

    def endpoint_for(self, service: str, region: str) -> Optional[EndpointConfig]:
        """
        Custom endpoint for ``(service, region)``.

        Returns None for anything but S3 in the default region, meaning the
        client should fall back to its own endpoint resolution.
        """
        if service == S3_SERVICE_ID and region == self.default_region:
            return self.resolve()
        return None

    def client_region(self) -> str:
        return (
            self.env.get("AWS_REGION")
            or self.env.get("AWS_DEFAULT_REGION")
            or self.default_region
        )

    def build_client(self, session: Optional[boto3.session.Session] = None) -> Any:
        """
        Build a boto3 S3 client for this invocation.

        Raises:
            EndpointError: If the client configuration cannot be built.
        """
        region = self.client_region()
        endpoint = self.endpoint_for(S3_SERVICE_ID, region)
        endpoint_url = endpoint.service_url if endpoint else None
        credentials = {
            arg: self.env[var] for arg, var in _CREDENTIAL_VARS.items() if self.env.get(var)
        }

        try:
            if session is None:
                session = boto3.session.Session(region_name=region, **credentials)
            client = session.client(
                S3_SERVICE_ID,
                region_name=region,
                endpoint_url=endpoint_url,
                config=BotoConfig(s3={"addressing_style": "path"}),
            )
        except (BotoCoreError, ValueError) as exc:
            logger.error(
                "s3_client_build_failed",
                region=region,
                endpoint_url=endpoint_url,
                exc_info=exc,
            )
            raise EndpointError(f"building S3 client: {exc}") from exc

        logger.debug(
            "s3_client_built",
            region=region,
            endpoint_url=endpoint_url or "default",
            addressing_style="path",
        )
        return client


__all__ = [
    "EndpointResolver",
    "ENDPOINT_OVERRIDE_VAR",
    "DEFAULT_REGION",
    "DEFAULT_SERVICE_URL",
]
