import os
import threading
from datetime import datetime, timezone

import pytest

from s3demo.client.exceptions import ObjectError, ServiceError
from s3demo.client.types import (
    BucketSummary,
    ListBucketsOutput,
    ListObjectsOptions,
    ListObjectsPage,
    ObjectSummary,
    PollPolicy,
)

def pytest_configure(config):
    """Configure test environment."""
    # Keep unit tests away from real credentials and tracing
    os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
    os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")
    os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")
    os.environ.pop("S3DEMO_TRACE_OPS", None)


class FakeStorageClient:
    """
    In-memory StorageClient.

    New buckets stay invisible to bucket_exists for ``visibility_delay`` checks.
    Continuation tokens carry the last key returned, so deleting listed keys
    between pages does not shift later pages.
    """

    def __init__(self, visibility_delay=0):
        self.buckets = {}
        self.visibility_delay = visibility_delay
        self._invisible_checks = {}
        self.create_status = 200
        self.delete_bucket_status = 204
        self.fail_delete_keys = set()
        self.exists_calls = 0
        self.list_calls = []
        self.deleted_keys = []
        self.closed = False
        self._lock = threading.Lock()

    def add_bucket(self, bucket, keys=()):
        self.buckets[bucket] = {}
        for key in keys:
            self.add_object(bucket, key, b"data")

    def add_object(self, bucket, key, data):
        self.buckets[bucket][key] = (data, datetime(2025, 1, 2, tzinfo=timezone.utc))

    def create_bucket(self, bucket):
        if bucket in self.buckets:
            raise ServiceError("Bucket already owned by you", operation="CREATE", status_code=409)
        if self.create_status == 200:
            self.buckets[bucket] = {}
            self._invisible_checks[bucket] = self.visibility_delay
        return self.create_status

    def bucket_exists(self, bucket):
        with self._lock:
            self.exists_calls += 1
            remaining = self._invisible_checks.get(bucket, 0)
            if remaining > 0:
                self._invisible_checks[bucket] = remaining - 1
                return False
        return bucket in self.buckets

    def list_buckets(self):
        return ListBucketsOutput(
            owner="demo-owner",
            buckets=[BucketSummary(name=name, creation_date=None) for name in sorted(self.buckets)],
        )

    def list_objects(self, bucket, options=None):
        options = options or ListObjectsOptions()
        self.list_calls.append(options)
        if bucket not in self.buckets:
            raise ServiceError("Bucket does not exist", operation="LIST", status_code=404)
        max_keys = options.max_keys or 1000
        with self._lock:
            keys = sorted(self.buckets[bucket])
            if options.continuation_token:
                last = options.continuation_token.split(":", 1)[1]
                keys = [k for k in keys if k > last]
            page_keys = keys[:max_keys]
            items = [
                ObjectSummary(key=k, last_modified=self.buckets[bucket][k][1], size=len(self.buckets[bucket][k][0]))
                for k in page_keys
            ]
        truncated = len(keys) > max_keys
        return ListObjectsPage(
            items=items,
            next_token=f"after:{page_keys[-1]}" if truncated else None,
            truncated=truncated,
        )

    def delete_object(self, bucket, key):
        if key in self.fail_delete_keys:
            raise ObjectError("Access denied", operation="DELETE_OBJECT", status_code=403)
        with self._lock:
            self.buckets[bucket].pop(key, None)
            self.deleted_keys.append(key)
        return 204

    def delete_bucket(self, bucket):
        if bucket not in self.buckets:
            raise ServiceError("Bucket does not exist", operation="DELETE", status_code=404)
        if self.buckets[bucket]:
            raise ServiceError("Bucket is not empty", operation="DELETE", status_code=409)
        if self.delete_bucket_status == 204:
            del self.buckets[bucket]
        return self.delete_bucket_status

    def put_object(self, bucket, key, file_path, content_type=None, metadata=None):
        if bucket not in self.buckets:
            raise ObjectError("Bucket does not exist", operation="PUT", status_code=404)
        with open(file_path, "rb") as f:
            self.add_object(bucket, key, f.read())
        return 200

    def get_object(self, bucket, key):
        raise NotImplementedError

    def generate_presigned_url(self, bucket, key, expires_at):
        return f"https://fake.example/{bucket}/{key}?expires={int(expires_at.timestamp())}"

    def close(self):
        self.closed = True


@pytest.fixture
def fake_client():
    """Fixture to provide an empty in-memory storage client."""
    return FakeStorageClient()


@pytest.fixture
def fast_policy():
    """Readiness poll that never sleeps."""
    return PollPolicy(interval=0, max_wait=None, max_attempts=50)


@pytest.fixture
def source_file(tmp_path):
    """A small CSV file to upload."""
    path = tmp_path / "notes.csv"
    path.write_text("id,note\n1,hello\n")
    return str(path)
