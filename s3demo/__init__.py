# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""Demonstration client for S3-compatible object storage."""
from .client import BucketLifecycleCoordinator, PollPolicy, S3Client, Session

__version__ = "0.1.0"

__all__ = ["S3Client", "Session", "BucketLifecycleCoordinator", "PollPolicy"]
