# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
from datetime import datetime
from typing import Dict, Optional, Protocol, runtime_checkable

from .types import ListBucketsOutput, ListObjectsOptions, ListObjectsPage


@runtime_checkable
class StorageClient(Protocol):
    """
    Operations the lifecycle coordinator and the demo need from a storage backend.

    Implementations raise s3demo exceptions: ServiceError (or a subclass) when the
    service rejects a request and StorageUnavailable when it cannot be reached.
    S3Client is the boto3-backed implementation.
    """

    def create_bucket(self, bucket: str) -> int: ...

    def bucket_exists(self, bucket: str) -> bool: ...

    def list_buckets(self) -> ListBucketsOutput: ...

    def list_objects(self, bucket: str, options: Optional[ListObjectsOptions] = None) -> ListObjectsPage: ...

    def delete_object(self, bucket: str, key: str) -> int: ...

    def delete_bucket(self, bucket: str) -> int: ...

    def put_object(
        self,
        bucket: str,
        key: str,
        file_path: str,
        content_type: Optional[str] = None,
        metadata: Optional[Dict[str, str]] = None,
    ) -> int: ...

    def get_object(self, bucket: str, key: str): ...

    def generate_presigned_url(self, bucket: str, key: str, expires_at: datetime) -> str: ...

    def close(self) -> None: ...
