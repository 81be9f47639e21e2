# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

@dataclass(frozen=True)
class ObjectSummary:
    """One entry of a bucket listing."""
    key: str
    last_modified: datetime
    size: int

@dataclass
class ListObjectsPage:
    """A single page returned by a listing call."""
    items: List[ObjectSummary] = field(default_factory=list)
    next_token: Optional[str] = None
    truncated: bool = False

@dataclass
class ListObjectsOptions:
    """Options for listing objects."""
    prefix: Optional[str] = None
    start_after: Optional[str] = None
    max_keys: Optional[int] = None
    continuation_token: Optional[str] = None

@dataclass(frozen=True)
class BucketSummary:
    """A bucket owned by the caller."""
    name: str
    creation_date: Optional[datetime]

@dataclass
class ListBucketsOutput:
    """Result of listing the caller's buckets."""
    owner: Optional[str]
    buckets: List[BucketSummary] = field(default_factory=list)

@dataclass
class PollPolicy:
    """
    Bounds for the bucket readiness poll.

    Attributes:
        interval (float): Seconds between existence checks.
        max_wait (Optional[float]): Give up after this many seconds. None means no time bound.
        max_attempts (Optional[int]): Give up after this many checks. None means no attempt bound.
    """
    interval: float = 0.5
    max_wait: Optional[float] = 60.0
    max_attempts: Optional[int] = None

class LifecycleState(str, Enum):
    """States a bucket moves through while the coordinator drives it."""
    ABSENT = "absent"
    CREATING = "creating"
    PROPAGATING = "propagating"
    READY = "ready"
    EMPTYING = "emptying"
    DELETING = "deleting"
    DELETED = "deleted"
