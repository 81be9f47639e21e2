# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""
Bucket Lifecycle Module.

This module drives a bucket through its lifecycle: existence check, creation,
waiting for the new bucket to become visible, paginated enumeration, bulk
deletion of its objects and finally removal of the bucket itself.

Every step asks the storage service again; no bucket state is kept between
calls. Listing under concurrent modification by another client is not
isolated: keys added while a bucket is being emptied may survive, and a
continuation token may skip or repeat keys that changed after it was issued.

Classes:
    BucketLifecycleCoordinator: Sequences the lifecycle operations over a StorageClient.
"""
import time
import threading
from concurrent.futures import FIRST_COMPLETED, ThreadPoolExecutor, wait
from typing import Callable, Iterator, Optional

from .base import StorageClient
from .client import MAX_LIST_KEYS
from .exceptions import (
    CreateError,
    DeleteError,
    OperationCancelled,
    ReadinessTimeout,
    S3DemoError,
    ServiceError,
)
from .retry import poll_until
from .types import LifecycleState, ListObjectsOptions, ListObjectsPage, ObjectSummary, PollPolicy
from ..utils import logger, time_function

STATUS_CREATED = 200
STATUS_NO_CONTENT = 204
DELETE_OBJECT_OK = (200, 204)

StateListener = Callable[[str, LifecycleState], None]


class BucketLifecycleCoordinator:
    """
    Sequences bucket lifecycle operations over an injected storage client.

    Only the readiness poll after a successful create is repeated; every other
    operation makes a single attempt and raises on failure.

    Attributes:
        client (StorageClient): Backend that performs the requests
        poll_policy (PollPolicy): Default bounds for the readiness poll
        max_workers (int): Concurrent object deletions in empty_bucket
    """

    def __init__(
        self,
        client: StorageClient,
        poll_policy: Optional[PollPolicy] = None,
        on_state_change: Optional[StateListener] = None,
        max_workers: int = 8,
    ):
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.client = client
        self.poll_policy = poll_policy or PollPolicy()
        self.max_workers = max_workers
        self._on_state_change = on_state_change

    def _transition(self, bucket: str, state: LifecycleState):
        logger.info(f"Bucket {bucket}: {state.value}")
        if self._on_state_change is not None:
            self._on_state_change(bucket, state)

    def exists(self, bucket: str) -> bool:
        """
        Ask the service whether the bucket exists.

        Raises:
            StorageUnavailable: If the service cannot be reached.
            ServiceError: If the service rejects the check.
        """
        return self.client.bucket_exists(bucket)

    def create(
        self,
        bucket: str,
        policy: Optional[PollPolicy] = None,
        cancel_event: Optional[threading.Event] = None,
    ):
        """
        Create a bucket and wait until the service reports it as existing.

        The create request is sent once; callers decide whether to try again.

        Args:
            bucket (str): Bucket name.
            policy (PollPolicy, optional): Bounds for the readiness poll.
            cancel_event (threading.Event, optional): Set to abandon the readiness poll.

        Raises:
            CreateError: If the service rejects the request or answers with a status other than 200.
            ReadinessTimeout: If the bucket does not become visible within the poll bounds.
            OperationCancelled: If cancel_event is set while waiting.
        """
        start_time = time.time()
        self._transition(bucket, LifecycleState.CREATING)
        try:
            status = self.client.create_bucket(bucket)
        except CreateError:
            raise
        except ServiceError as e:
            logger.error(f"Error creating bucket {bucket}: {e.message}")
            raise CreateError(e.message, status_code=e.status_code) from e

        if status != STATUS_CREATED:
            logger.error(f"Bucket creation for {bucket} returned status {status}")
            raise CreateError(
                f"Bucket creation did not return the expected status code: {status}",
                status_code=status,
            )

        self.wait_until_ready(bucket, policy=policy, cancel_event=cancel_event)
        time_function("create", start_time)

    def wait_until_ready(
        self,
        bucket: str,
        policy: Optional[PollPolicy] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> int:
        """
        Poll until the bucket is visible.

        Only a "does not exist yet" answer is retried; errors from the existence
        check propagate immediately.

        Returns:
            int: Number of existence checks made.
        """
        self._transition(bucket, LifecycleState.PROPAGATING)
        attempts = poll_until(
            lambda: self.exists(bucket),
            policy=policy or self.poll_policy,
            cancel_event=cancel_event,
            description=f"bucket {bucket} to become visible",
        )
        self._transition(bucket, LifecycleState.READY)
        return attempts

    def ensure_ready(
        self,
        bucket: str,
        policy: Optional[PollPolicy] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> bool:
        """
        Make sure the bucket exists, creating it if needed.

        Returns:
            bool: True if the bucket was created, False if it already existed.
        """
        if self.exists(bucket):
            self._transition(bucket, LifecycleState.READY)
            return False
        self._transition(bucket, LifecycleState.ABSENT)
        self.create(bucket, policy=policy, cancel_event=cancel_event)
        return True

    def list_pages(self, bucket: str, page_size: int = MAX_LIST_KEYS) -> Iterator[ListObjectsPage]:
        """
        Enumerate a bucket one page at a time.

        Nothing is requested until the first page is pulled. Each call starts a
        fresh enumeration.

        Args:
            bucket (str): Bucket name.
            page_size (int): Keys per listing request, 1 to 1000.

        Raises:
            ValueError: If page_size is out of range.
        """
        if not 1 <= page_size <= MAX_LIST_KEYS:
            raise ValueError(f"page_size must be between 1 and {MAX_LIST_KEYS}, got {page_size}")
        return self._iter_pages(bucket, page_size)

    def _iter_pages(self, bucket: str, page_size: int) -> Iterator[ListObjectsPage]:
        token = None
        while True:
            page = self.client.list_objects(
                bucket, ListObjectsOptions(max_keys=page_size, continuation_token=token)
            )
            yield page
            if not page.truncated:
                return
            if not page.next_token:
                raise ServiceError("Truncated listing returned no continuation token", operation="LIST")
            token = page.next_token

    def list_all(self, bucket: str, page_size: int = MAX_LIST_KEYS) -> Iterator[ObjectSummary]:
        """
        Lazily enumerate every object in a bucket.

        Args:
            bucket (str): Bucket name.
            page_size (int): Keys per listing request, 1 to 1000.

        Returns:
            Iterator[ObjectSummary]: Objects in listing order.
        """
        pages = self.list_pages(bucket, page_size)
        return (obj for page in pages for obj in page.items)

    def empty_bucket(
        self,
        bucket: str,
        page_size: int = MAX_LIST_KEYS,
        cancel_event: Optional[threading.Event] = None,
        max_wait: Optional[float] = None,
    ) -> int:
        """
        Delete every object in a bucket.

        Deletions run on a thread pool while the listing continues, with at most
        ``2 * max_workers`` submitted and unfinished at any time. A failed deletion
        does not stop the others. The cancel event and deadline are checked before
        each submission. All submitted deletions have finished by the time this
        method returns or raises, and every error it raises carries ``failed_keys``,
        the objects whose deletion failed.

        Args:
            bucket (str): Bucket name.
            page_size (int): Keys per listing request, 1 to 1000.
            cancel_event (threading.Event, optional): Set to stop submitting deletions.
            max_wait (float, optional): Stop submitting deletions after this many seconds.

        Returns:
            int: Number of objects deleted.

        Raises:
            DeleteError: If listing failed or any object could not be deleted.
            OperationCancelled: If cancel_event was set.
            ReadinessTimeout: If max_wait elapsed before the bucket was empty.
        """
        start_time = time.time()
        pages = self.list_pages(bucket, page_size)
        self._transition(bucket, LifecycleState.EMPTYING)

        max_in_flight = self.max_workers * 2
        in_flight = {}
        failed = []
        deleted = 0
        submitted = 0
        listing_error = None
        interrupted = None
        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="s3demo-delete") as executor:
            try:
                for page in pages:
                    for obj in page.items:
                        interrupted = self._interruption(bucket, start_time, cancel_event, max_wait)
                        if interrupted is not None:
                            break
                        if len(in_flight) >= max_in_flight:
                            done, _ = wait(in_flight, return_when=FIRST_COMPLETED)
                            deleted += self._collect(bucket, in_flight, done, failed)
                        in_flight[executor.submit(self.client.delete_object, bucket, obj.key)] = obj.key
                        submitted += 1
                    if interrupted is not None:
                        break
            except S3DemoError as e:
                listing_error = e
            done, _ = wait(in_flight)
            deleted += self._collect(bucket, in_flight, done, failed)

        logger.info(f"Deleted {deleted} of {submitted} objects from {bucket}")
        time_function("empty_bucket", start_time)

        if listing_error is not None:
            raise DeleteError(
                f"Listing {bucket} failed after {deleted} deletions: {listing_error.message}",
                status_code=getattr(listing_error, "status_code", None),
                failed_keys=failed,
            ) from listing_error
        if interrupted is not None:
            error_cls, message = interrupted
            raise error_cls(f"{message} after {deleted} deletions", failed_keys=failed)
        if failed:
            raise DeleteError(
                f"Failed to delete {len(failed)} of {submitted} objects from {bucket}",
                failed_keys=failed,
            )
        return deleted

    @staticmethod
    def _collect(bucket, in_flight, done, failed) -> int:
        deleted = 0
        for future in done:
            key = in_flight.pop(future)
            try:
                status = future.result()
            except S3DemoError as e:
                logger.error(f"Error deleting {bucket}/{key}: {e}")
                failed.append(key)
                continue
            if status not in DELETE_OBJECT_OK:
                logger.error(f"Deleting {bucket}/{key} returned status {status}")
                failed.append(key)
                continue
            deleted += 1
        return deleted

    @staticmethod
    def _interruption(bucket, start_time, cancel_event, max_wait):
        if cancel_event is not None and cancel_event.is_set():
            return OperationCancelled, f"Emptying {bucket} was cancelled"
        if max_wait is not None and time.time() - start_time > max_wait:
            return ReadinessTimeout, f"Emptying {bucket} did not finish within {max_wait:.1f}s"
        return None

    def delete(self, bucket: str):
        """
        Delete an empty bucket.

        Raises:
            DeleteError: If the service rejects the request (for example because
                the bucket still holds objects) or answers with a status other than 204.
        """
        self._transition(bucket, LifecycleState.DELETING)
        try:
            status = self.client.delete_bucket(bucket)
        except DeleteError:
            raise
        except ServiceError as e:
            logger.error(f"Error deleting bucket {bucket}: {e.message}")
            raise DeleteError(e.message, status_code=e.status_code) from e

        if status != STATUS_NO_CONTENT:
            logger.error(f"Bucket deletion for {bucket} returned status {status}")
            raise DeleteError(
                f"Bucket deletion did not return the expected status code: {status}",
                status_code=status,
            )
        self._transition(bucket, LifecycleState.DELETED)

    def destroy(
        self,
        bucket: str,
        page_size: int = MAX_LIST_KEYS,
        cancel_event: Optional[threading.Event] = None,
        max_wait: Optional[float] = None,
    ) -> int:
        """
        Empty the bucket, then delete it. The bucket is left in place if emptying fails.

        Returns:
            int: Number of objects deleted before the bucket was removed.
        """
        deleted = self.empty_bucket(bucket, page_size=page_size, cancel_event=cancel_event, max_wait=max_wait)
        self.delete(bucket)
        return deleted
