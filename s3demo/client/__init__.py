# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
from .client import S3Client, Session
from .lifecycle import BucketLifecycleCoordinator
from .base import StorageClient
from .types import (
    BucketSummary,
    LifecycleState,
    ListBucketsOutput,
    ListObjectsOptions,
    ListObjectsPage,
    ObjectSummary,
    PollPolicy,
)
from .exceptions import (
    S3DemoError,
    ServiceError,
    CreateError,
    DeleteError,
    ObjectError,
    StorageUnavailable,
    ReadinessTimeout,
    OperationCancelled,
    ConfigurationError,
)

__all__ = [
    "S3Client",
    "Session",
    "BucketLifecycleCoordinator",
    "StorageClient",
    "BucketSummary",
    "LifecycleState",
    "ListBucketsOutput",
    "ListObjectsOptions",
    "ListObjectsPage",
    "ObjectSummary",
    "PollPolicy",
    "S3DemoError",
    "ServiceError",
    "CreateError",
    "DeleteError",
    "ObjectError",
    "StorageUnavailable",
    "ReadinessTimeout",
    "OperationCancelled",
    "ConfigurationError",
]
