"""Key-value JSON documents kept on local disk or in S3.

This backs the local persistence strategy: each key (``budget-categories``,
``fund-sources``, ...) is one JSON document. When an S3 bucket is configured
documents live under ``<prefix>/<key>.json`` in the bucket, otherwise under
``<root>/<key>.json`` on disk.
"""

import json
from pathlib import Path
from typing import Any, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from config import AWS_REGION, DATA_DIR, S3_BUCKET
from errors import StorageError
from log_setup import get_logger

logger = get_logger("storage")


def get_s3_client(region: str = AWS_REGION):
    return boto3.client("s3", region_name=region)


class DocumentStore:
    def __init__(
        self,
        root: Optional[Path] = None,
        bucket: Optional[str] = None,
        prefix: str = "budget",
        s3_client=None,
    ):
        self.root = Path(root) if root is not None else DATA_DIR
        self.bucket = bucket
        self.prefix = prefix
        self._s3 = s3_client

    @classmethod
    def from_config(cls) -> "DocumentStore":
        return cls(root=DATA_DIR, bucket=S3_BUCKET)

    @property
    def s3(self):
        if self._s3 is None:
            self._s3 = get_s3_client()
        return self._s3

    def _key(self, key: str) -> str:
        return f"{self.prefix}/{key}.json"

    def _path(self, key: str) -> Path:
        return self.root / f"{key}.json"

    def read(self, key: str) -> Optional[Any]:
        """
        Returns the decoded document, or None if it was never written.
        """
        if self.bucket:
            try:
                obj = self.s3.get_object(Bucket=self.bucket, Key=self._key(key))
                body = obj["Body"].read()
            except ClientError as e:
                if e.response.get("Error", {}).get("Code") in ("NoSuchKey", "404"):
                    return None
                raise StorageError(f"S3 download error for {key}: {e}") from e
            except BotoCoreError as e:
                raise StorageError(f"S3 download error for {key}: {e}") from e
        else:
            local_path = self._path(key)
            if not local_path.exists():
                return None
            try:
                body = local_path.read_bytes()
            except OSError as e:
                raise StorageError(f"Could not read {local_path}: {e}") from e

        try:
            return json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise StorageError(f"Document {key} is not valid JSON: {e}") from e

    def write(self, key: str, value: Any) -> None:
        body = json.dumps(value, indent=2).encode("utf-8")
        if self.bucket:
            try:
                self.s3.put_object(Bucket=self.bucket, Key=self._key(key), Body=body)
            except (BotoCoreError, ClientError) as e:
                raise StorageError(f"S3 upload error for {key}: {e}") from e
        else:
            local_path = self._path(key)
            try:
                local_path.parent.mkdir(parents=True, exist_ok=True)
                local_path.write_bytes(body)
            except OSError as e:
                raise StorageError(f"Could not write {local_path}: {e}") from e
        logger.debug("Wrote document %s", key)

