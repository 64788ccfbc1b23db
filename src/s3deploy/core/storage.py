"""Object store backends used by the transfer engine."""

from __future__ import annotations

import asyncio
import os
from typing import Any, Protocol


class ObjectStore(Protocol):
    async def put(self, local_path: str, key: str) -> int:
        """Stream ``local_path`` to ``key``; return the number of bytes sent."""

    async def delete(self, local_path: str, key: str) -> None:
        """Delete ``key``; ``local_path`` must still exist locally."""


class S3ObjectStore:
    """Async wrapper around blocking boto3 put/delete calls."""

    def __init__(self, s3_client: Any, bucket: str) -> None:
        self.s3 = s3_client
        self.bucket = bucket

    def _put(self, local_path: str, key: str) -> int:
        with open(local_path, "rb") as body:
            size = os.fstat(body.fileno()).st_size
            self.s3.put_object(Bucket=self.bucket, Key=key, Body=body)
        return size

    def _delete(self, local_path: str, key: str) -> None:
        # A missing local file means the declared outputs and the filesystem
        # disagree; the FileNotFoundError is that spec's error.
        with open(local_path, "rb"):
            pass
        self.s3.delete_object(Bucket=self.bucket, Key=key)

    async def put(self, local_path: str, key: str) -> int:
        """Upload file to S3."""
        return await asyncio.to_thread(self._put, local_path, key)

    async def delete(self, local_path: str, key: str) -> None:
        """Delete object from S3."""
        await asyncio.to_thread(self._delete, local_path, key)


__all__ = ["ObjectStore", "S3ObjectStore"]
