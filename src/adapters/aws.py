from __future__ import annotations

import os
from dataclasses import dataclass
from typing import TYPE_CHECKING

import boto3
from botocore.client import BaseClient

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client
else:
    S3Client = BaseClient  # type: ignore[misc,assignment]

LOCALSTACK_DEFAULT_URL = "http://localhost:4566"


def _env_flag(name: str) -> bool:
    return (os.getenv(name) or "").strip().lower() in {"1", "true", "yes", "y", "on"}


@dataclass(frozen=True, slots=True)
class AwsRuntimeConfig:
    """Where boto3 should connect: real AWS, or LocalStack in dev and CI.

    Env vars:
      - AWS_REGION: defaults to eu-west-1
      - ENDPOINT_URL: explicit endpoint, wins over everything else
      - USE_LOCALSTACK: 1|true to use LocalStack on its default port
    """

    region: str
    endpoint_url: str | None

    @staticmethod
    def from_env() -> AwsRuntimeConfig:
        endpoint_url = (os.getenv("ENDPOINT_URL") or "").strip() or None
        if endpoint_url is None and _env_flag("USE_LOCALSTACK"):
            endpoint_url = LOCALSTACK_DEFAULT_URL

        return AwsRuntimeConfig(
            region=os.getenv("AWS_REGION", "eu-west-1"),
            endpoint_url=endpoint_url,
        )

    def client(self, service: str) -> BaseClient:
        session = boto3.session.Session(region_name=self.region)
        return session.client(service, endpoint_url=self.endpoint_url)


def s3_client() -> S3Client:
    return AwsRuntimeConfig.from_env().client("s3")  # type: ignore[return-value]
