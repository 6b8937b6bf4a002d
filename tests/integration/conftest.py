from __future__ import annotations

import os

import httpx
import pytest

DEFAULT_ENDPOINT = "http://localhost:4566"


@pytest.fixture(scope="session", autouse=True)
def localstack_env() -> None:
    """Point boto3 at LocalStack unless the environment says otherwise."""

    os.environ.setdefault("USE_LOCALSTACK", "true")
    os.environ.setdefault("ENDPOINT_URL", DEFAULT_ENDPOINT)
    os.environ.setdefault("AWS_REGION", "eu-west-1")

    # LocalStack ignores them, but boto3 refuses to sign without credentials.
    os.environ.setdefault("AWS_ACCESS_KEY_ID", "test")
    os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "test")


@pytest.fixture(scope="session")
def require_localstack(localstack_env: None) -> str:
    endpoint_url = os.environ.get("ENDPOINT_URL") or DEFAULT_ENDPOINT
    try:
        healthy = httpx.get(
            endpoint_url.rstrip("/") + "/_localstack/health", timeout=1.5
        ).is_success
    except httpx.HTTPError:
        healthy = False

    if not healthy:
        msg = f"LocalStack not reachable at {endpoint_url}"
        # CI starts LocalStack, so a missing one there is a real failure.
        if os.getenv("CI") or os.getenv("REQUIRE_LOCALSTACK"):
            pytest.fail(msg, pytrace=False)
        pytest.skip(f"{msg}; skipping integration tests")
    return endpoint_url
