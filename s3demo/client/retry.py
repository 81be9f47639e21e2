# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""
Retry Module.

This module holds the two places where s3demo deals with failed or not-yet-visible
state: translating botocore faults into s3demo exceptions at the client boundary,
and the bounded poll used to wait for a freshly created bucket to become visible.

Functions:
    convert_errors: Decorator translating botocore exceptions for one client operation.
    poll_until: Bounded fixed-interval poll with cancellation.
    _convert_client_error: Helper converting a botocore ClientError to an s3demo exception.
"""
import time
from functools import wraps
from typing import Callable, Any, Optional
import threading

from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectionError as BotoConnectionError,
    HTTPClientError,
    NoCredentialsError,
    PartialCredentialsError,
    ProfileNotFound,
)

from .exceptions import (
    S3DemoError,
    ServiceError,
    ObjectError,
    StorageUnavailable,
    ReadinessTimeout,
    OperationCancelled,
    ConfigurationError,
)
from .types import PollPolicy
from ..utils import logger

UNAVAILABLE_STATUS_CODES = {500, 502, 503, 504}

OBJECT_OPERATIONS = {"PUT", "GET", "DELETE_OBJECT", "PRESIGN"}

_FRIENDLY_MESSAGES = {
    "BucketNotEmpty": "Bucket is not empty",
    "NoSuchBucket": "Bucket does not exist",
    "BucketAlreadyExists": "Bucket already exists",
    "BucketAlreadyOwnedByYou": "Bucket already owned by you",
    "InvalidBucketName": "Invalid bucket name",
    "AccessDenied": "Access denied",
    "NoSuchKey": "Object does not exist",
    "EntityTooLarge": "Object size exceeds limits",
}

def _convert_client_error(e: ClientError, operation: str = None) -> S3DemoError:
    """
    Convert a botocore ClientError to an s3demo exception.

    The service's own error message is kept; a short description is put in front
    of it for the error codes a demo user is likely to hit.

    Args:
        e (ClientError): The error raised by botocore.
        operation (str, optional): The operation being performed. Defaults to None.

    Returns:
        S3DemoError: ObjectError for object operations, StorageUnavailable for
            server-side outages and ServiceError otherwise.
    """
    error = e.response.get("Error", {}) if hasattr(e, "response") else {}
    error_code = str(error.get("Code", "") or "")
    error_msg = str(error.get("Message", "") or "") or str(e)
    status_code = e.response.get("ResponseMetadata", {}).get("HTTPStatusCode") if hasattr(e, "response") else None

    if status_code in UNAVAILABLE_STATUS_CODES or error_code in ("SlowDown", "ServiceUnavailable"):
        return StorageUnavailable(f"{error_code or status_code}: {error_msg}")

    friendly = _FRIENDLY_MESSAGES.get(error_code)
    if friendly is None and error_code in ("404", "NotFound"):
        friendly = "Object does not exist" if operation in OBJECT_OPERATIONS else "Bucket does not exist"
    if friendly is None and error_code == "403":
        friendly = "Access denied"
    message = f"{friendly} ({error_msg})" if friendly and friendly != error_msg else error_msg

    if operation in OBJECT_OPERATIONS:
        return ObjectError(message, operation=operation, status_code=status_code)
    return ServiceError(message, operation=operation, status_code=status_code)

def convert_errors(operation: str) -> Callable:
    """
    Decorator translating botocore exceptions raised by a client operation.

    Args:
        operation (str): Operation name used in error codes (e.g. "CREATE", "PUT").

    Returns:
        Callable: A decorator that wraps the function.
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return func(*args, **kwargs)
            except ClientError as e:
                converted = _convert_client_error(e, operation)
                logger.debug(f"{func.__name__} failed: {converted}")
                raise converted from e
            except (BotoConnectionError, HTTPClientError) as e:
                logger.warning(f"Storage service unreachable during {func.__name__}: {e}")
                raise StorageUnavailable(str(e)) from e
            except (NoCredentialsError, PartialCredentialsError, ProfileNotFound) as e:
                raise ConfigurationError(str(e)) from e
            except BotoCoreError as e:
                raise ServiceError(str(e), operation=operation) from e
        return wrapper
    return decorator

def poll_until(
    condition: Callable[[], bool],
    policy: Optional[PollPolicy] = None,
    cancel_event: Optional[threading.Event] = None,
    description: str = "condition",
) -> int:
    """
    Call ``condition`` at a fixed interval until it returns True.

    Errors raised by ``condition`` are not retried; they propagate to the caller.

    Args:
        condition (Callable[[], bool]): Check to repeat.
        policy (PollPolicy, optional): Interval and bounds. Defaults to PollPolicy().
        cancel_event (threading.Event, optional): Set by the caller to stop waiting.
        description (str): Used in log and error messages.

    Returns:
        int: Number of checks made.

    Raises:
        ReadinessTimeout: If max_wait or max_attempts is exhausted.
        OperationCancelled: If cancel_event is set.
    """
    policy = policy or PollPolicy()
    start = time.monotonic()
    attempts = 0

    while True:
        if cancel_event is not None and cancel_event.is_set():
            raise OperationCancelled(f"Stopped waiting for {description} after {attempts} checks")

        attempts += 1
        if condition():
            logger.debug(f"{description} satisfied after {attempts} checks")
            return attempts

        if policy.max_attempts is not None and attempts >= policy.max_attempts:
            raise ReadinessTimeout(f"{description} not satisfied after {attempts} checks")

        delay = policy.interval
        if policy.max_wait is not None:
            remaining = policy.max_wait - (time.monotonic() - start)
            if remaining <= 0:
                raise ReadinessTimeout(
                    f"{description} not satisfied within {policy.max_wait:.1f}s ({attempts} checks)"
                )
            delay = min(delay, remaining)

        logger.debug(f"Waiting {delay:.2f}s for {description} (check {attempts})")
        if cancel_event is not None:
            if cancel_event.wait(delay):
                raise OperationCancelled(f"Stopped waiting for {description} after {attempts} checks")
        elif delay > 0:
            time.sleep(delay)
