from __future__ import annotations

import os

import httpx
import pytest

DEFAULT_ENDPOINT = "http://localhost:4566"


def _localstack_s3_ready(endpoint_url: str) -> bool:
    try:
        resp = httpx.get(endpoint_url.rstrip("/") + "/_localstack/health", timeout=1.5)
    except httpx.HTTPError:
        return False
    if resp.status_code != 200:
        return False
    services = resp.json().get("services", {})
    return services.get("s3") in {"available", "running"}


@pytest.fixture(scope="session", autouse=True)
def localstack_env() -> None:
    """Point boto3 at LocalStack for the S3 feed tests."""

    os.environ.setdefault("USE_LOCALSTACK", "true")
    os.environ.setdefault("ENDPOINT_URL", DEFAULT_ENDPOINT)
    os.environ.setdefault("AWS_REGION", "eu-west-1")

    # boto3 refuses to sign requests without credentials, even for LocalStack.
    os.environ.setdefault("AWS_ACCESS_KEY_ID", "test")
    os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "test")


@pytest.fixture(scope="session")
def require_localstack(localstack_env: None) -> str:
    endpoint_url = os.environ.get("ENDPOINT_URL") or DEFAULT_ENDPOINT
    if not _localstack_s3_ready(endpoint_url):
        msg = f"LocalStack S3 not reachable at {endpoint_url}"

        # CI starts LocalStack, so a missing instance there is a real failure.
        if os.getenv("CI") or os.getenv("REQUIRE_LOCALSTACK"):
            pytest.fail(msg, pytrace=False)

        pytest.skip(f"{msg}; skipping integration tests")
    return endpoint_url
