import asyncio
import logging
from pathlib import Path
from typing import Dict, List

import boto3
import pytest
import structlog
from moto import mock_aws

from s3deploy.core.endpoint import DEFAULT_REGION


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "unit: fast unit tests")
    config.addinivalue_line(
        "markers",
        "integration: tests that exercise several components together (moto S3, filesystem)",
    )
    config.addinivalue_line("markers", "s3: tests that interact with S3 or moto S3")


class RecordingStore:
    """
    In-memory ObjectStore that records how many calls overlap.

    ``missing`` paths fail like a missing local file would.
    """

    def __init__(self, delay: float = 0.005, missing: tuple[str, ...] = ()) -> None:
        self.delay = delay
        self.missing = set(missing)
        self.active = 0
        self.peak = 0
        self.calls: List[tuple[str, str, str]] = []
        self.objects: Dict[str, str] = {}

    async def _enter(self, op: str, local_path: str, key: str) -> None:
        self.active += 1
        self.peak = max(self.peak, self.active)
        self.calls.append((op, local_path, key))
        try:
            await asyncio.sleep(self.delay)
            if local_path in self.missing:
                raise FileNotFoundError(2, "No such file or directory", local_path)
        finally:
            self.active -= 1

    async def put(self, local_path: str, key: str) -> int:
        await self._enter("put", local_path, key)
        self.objects[key] = local_path
        return len(local_path)

    async def delete(self, local_path: str, key: str) -> None:
        await self._enter("delete", local_path, key)
        self.objects.pop(key, None)


@pytest.fixture
def recording_store():
    return RecordingStore()


@pytest.fixture
def aws_env(monkeypatch):
    """Fake credentials so boto3 never reaches for real ones."""
    env = {
        "AWS_ACCESS_KEY_ID": "testing",
        "AWS_SECRET_ACCESS_KEY": "testing",
        "AWS_SESSION_TOKEN": "testing",
        "AWS_DEFAULT_REGION": DEFAULT_REGION,
    }
    for name, value in env.items():
        monkeypatch.setenv(name, value)
    monkeypatch.delenv("AWS_S3_ENDPOINT", raising=False)
    monkeypatch.delenv("AWS_REGION", raising=False)
    return env


@pytest.fixture
def s3_client_mock(aws_env):
    """Moto-backed S3 client with a test bucket in the default region."""
    with mock_aws():
        s3 = boto3.client("s3", region_name=DEFAULT_REGION)
        s3.create_bucket(
            Bucket="test-deploy",
            CreateBucketConfiguration={"LocationConstraint": DEFAULT_REGION},
        )
        yield s3


@pytest.fixture
def build_tree(tmp_path: Path) -> Path:
    """A small build output directory."""
    out = tmp_path / "out"
    (out / "a").mkdir(parents=True)
    (out / "a" / "b.txt").write_bytes(b"bravo")
    (out / "index.html").write_bytes(b"<html></html>")
    (out / "css").mkdir()
    (out / "css" / "main.css").write_bytes(b"body {}")
    return out


@pytest.fixture
def reset_logging():
    """Undo configure_logging so later tests see structlog's defaults."""
    yield
    structlog.reset_defaults()
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(logging.WARNING)
