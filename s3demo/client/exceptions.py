# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
from typing import Iterable, Optional


class S3DemoError(Exception):
    """Base exception for s3demo client errors."""
    def __init__(self, message: str, code: str = "ERR_UNKNOWN"):
        self.code = code
        self.message = message
        super().__init__(f"{code}: {message}")

class ServiceError(S3DemoError):
    """The storage service rejected a request or returned an unexpected status."""
    def __init__(self, message: str, operation: str = None, status_code: Optional[int] = None, code: str = None):
        if code is None:
            code = "ERR_SERVICE"
            if operation:
                code = f"ERR_SERVICE_{operation.upper()}"
        self.operation = operation
        self.status_code = status_code
        super().__init__(message, code=code)

class CreateError(ServiceError):
    """Bucket creation failed."""
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message, operation="CREATE", status_code=status_code, code="ERR_BUCKET_CREATE")

class DeleteError(ServiceError):
    """Bucket deletion or bucket emptying failed."""
    def __init__(self, message: str, status_code: Optional[int] = None, failed_keys: Iterable[str] = ()):
        self.failed_keys = list(failed_keys)
        super().__init__(message, operation="DELETE", status_code=status_code, code="ERR_BUCKET_DELETE")

class ObjectError(ServiceError):
    """Object operation failed."""
    def __init__(self, message: str, operation: str = None, status_code: Optional[int] = None):
        code = "ERR_OBJECT"
        if operation:
            code = f"ERR_OBJECT_{operation.upper()}"
        super().__init__(message, operation=operation, status_code=status_code, code=code)

class StorageUnavailable(S3DemoError):
    """The storage service could not be reached."""
    def __init__(self, message: str):
        super().__init__(message, code="ERR_UNAVAILABLE")

class ReadinessTimeout(S3DemoError):
    """A bounded wait ran out before the expected condition was observed."""
    def __init__(self, message: str, failed_keys: Iterable[str] = ()):
        self.failed_keys = list(failed_keys)
        super().__init__(message, code="ERR_TIMEOUT")

class OperationCancelled(S3DemoError):
    """The caller cancelled a long-running operation."""
    def __init__(self, message: str, failed_keys: Iterable[str] = ()):
        self.failed_keys = list(failed_keys)
        super().__init__(message, code="ERR_CANCELLED")

class ConfigurationError(S3DemoError):
    """Configuration or credential error."""
    def __init__(self, message: str):
        super().__init__(message, code="ERR_CONFIG")
