# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""
Storage Client Module.

This module provides the S3Client class, a thin adapter over a boto3 S3 client
that exposes the operations the demo and the lifecycle coordinator need, with
botocore faults translated into s3demo exceptions.

Classes:
    Session: Connection settings (profile, region, endpoint).
    S3Client: Storage client for bucket and object operations.
"""
import math
import mimetypes
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError, ProfileNotFound

from .exceptions import ConfigurationError, ObjectError
from .retry import convert_errors
from .types import (
    BucketSummary,
    ListBucketsOutput,
    ListObjectsOptions,
    ListObjectsPage,
    ObjectSummary,
)
from ..utils import logger, trace_op

DEFAULT_REGION = "us-east-1"
# SigV4 presigned URLs are valid for at most seven days
MAX_PRESIGN_SECONDS = 7 * 24 * 3600
MAX_LIST_KEYS = 1000

@dataclass
class Session:
    """
    Connection settings for S3Client.

    Attributes:
        profile (str, optional): Named credentials profile. None uses the default chain.
        region (str, optional): Region name. None uses the profile or environment default.
        endpoint_url (str, optional): Custom endpoint for S3-compatible services.
        max_attempts (int): Transport-level attempts made by botocore per request.
    """
    profile: Optional[str] = None
    region: Optional[str] = None
    endpoint_url: Optional[str] = None
    max_attempts: int = 3

    def create_client(self):
        """
        Build the underlying boto3 S3 client.

        Raises:
            ConfigurationError: If the named profile does not exist.
        """
        try:
            boto_session = boto3.session.Session(profile_name=self.profile, region_name=self.region)
        except ProfileNotFound as e:
            raise ConfigurationError(str(e)) from e
        cfg = Config(retries={"max_attempts": self.max_attempts, "mode": "standard"})
        return boto_session.client("s3", endpoint_url=self.endpoint_url, config=cfg)


def _status(response) -> Optional[int]:
    return response.get("ResponseMetadata", {}).get("HTTPStatusCode")


class S3Client:
    """
    Client for an S3-compatible object storage service.

    Every method performs exactly one service request; nothing is cached between
    calls. Use as a context manager or call close() when done.

    Attributes:
        session (Session): Settings the client was built from.
    """

    def __init__(self, session: Optional[Session] = None, client=None):
        """
        Initialize the client.

        Args:
            session (Session, optional): Connection settings. Defaults to Session().
            client (optional): Pre-built boto3 S3 client. Built from ``session`` when omitted.
        """
        self.session = session or Session()
        self._s3 = client if client is not None else self.session.create_client()
        self._closed = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    @property
    def region(self) -> str:
        return self._s3.meta.region_name or DEFAULT_REGION

    def close(self):
        """Release the HTTP connection pool."""
        if self._closed:
            return
        self._closed = True
        close = getattr(self._s3, "close", None)
        if callable(close):
            close()
        logger.debug("S3 client closed")

    @convert_errors("CREATE")
    def create_bucket(self, bucket: str) -> int:
        """
        Create a bucket in the client's region.

        Args:
            bucket (str): Bucket name.

        Returns:
            int: HTTP status code of the response.
        """
        trace_op("create_bucket", bucket, region=self.region)
        kwargs = {"Bucket": bucket}
        if self.region != DEFAULT_REGION:
            kwargs["CreateBucketConfiguration"] = {"LocationConstraint": self.region}
        return _status(self._s3.create_bucket(**kwargs))

    @convert_errors("HEAD")
    def bucket_exists(self, bucket: str) -> bool:
        """
        Check whether a bucket exists.

        A bucket owned by another account answers 403 and is reported as existing.

        Args:
            bucket (str): Bucket name.

        Returns:
            bool: True if the bucket exists.
        """
        trace_op("head_bucket", bucket)
        try:
            self._s3.head_bucket(Bucket=bucket)
            return True
        except ClientError as e:
            code = str(e.response.get("Error", {}).get("Code", ""))
            if code in ("404", "NoSuchBucket", "NotFound"):
                return False
            if code in ("403", "AccessDenied", "Forbidden"):
                return True
            raise

    @convert_errors("LIST_BUCKETS")
    def list_buckets(self) -> ListBucketsOutput:
        """
        List the buckets owned by the caller across all regions.

        Returns:
            ListBucketsOutput: Owner display name and buckets.
        """
        trace_op("list_buckets", "*")
        resp = self._s3.list_buckets()
        owner = resp.get("Owner", {}).get("DisplayName")
        buckets = [
            BucketSummary(name=b["Name"], creation_date=b.get("CreationDate"))
            for b in resp.get("Buckets", [])
        ]
        return ListBucketsOutput(owner=owner, buckets=buckets)

    @convert_errors("LIST")
    def list_objects(self, bucket: str, options: Optional[ListObjectsOptions] = None) -> ListObjectsPage:
        """
        Fetch one page of a bucket listing.

        Args:
            bucket (str): Bucket name.
            options (ListObjectsOptions, optional): Continuation token, page size and filters.

        Returns:
            ListObjectsPage: The objects on this page and the token for the next one.
        """
        options = options or ListObjectsOptions()
        kwargs = {"Bucket": bucket}
        if options.max_keys is not None:
            kwargs["MaxKeys"] = options.max_keys
        if options.continuation_token:
            kwargs["ContinuationToken"] = options.continuation_token
        if options.prefix:
            kwargs["Prefix"] = options.prefix
        if options.start_after:
            kwargs["StartAfter"] = options.start_after

        trace_op("list_objects_v2", bucket, max_keys=options.max_keys, token=options.continuation_token)
        resp = self._s3.list_objects_v2(**kwargs)
        items = [
            ObjectSummary(key=obj["Key"], last_modified=obj.get("LastModified"), size=obj.get("Size", 0))
            for obj in resp.get("Contents", [])
        ]
        truncated = bool(resp.get("IsTruncated", False))
        return ListObjectsPage(
            items=items,
            next_token=resp.get("NextContinuationToken") if truncated else None,
            truncated=truncated,
        )

    @convert_errors("DELETE_OBJECT")
    def delete_object(self, bucket: str, key: str) -> int:
        """
        Delete one object.

        Returns:
            int: HTTP status code of the response.
        """
        trace_op("delete_object", f"{bucket}/{key}")
        return _status(self._s3.delete_object(Bucket=bucket, Key=key))

    @convert_errors("DELETE")
    def delete_bucket(self, bucket: str) -> int:
        """
        Delete an empty bucket.

        Returns:
            int: HTTP status code of the response (204 on success).
        """
        trace_op("delete_bucket", bucket)
        return _status(self._s3.delete_bucket(Bucket=bucket))

    @convert_errors("PUT")
    def put_object(
        self,
        bucket: str,
        key: str,
        file_path: str,
        content_type: Optional[str] = None,
        metadata: Optional[Dict[str, str]] = None,
    ) -> int:
        """
        Upload a local file as an object.

        Args:
            bucket (str): Bucket name.
            key (str): Object key.
            file_path (str): Path of the file to upload.
            content_type (str, optional): MIME type. Guessed from the file name when omitted.
            metadata (Dict[str, str], optional): User metadata stored with the object.

        Returns:
            int: HTTP status code of the response.
        """
        if content_type is None:
            content_type = mimetypes.guess_type(file_path)[0] or "application/octet-stream"
        kwargs = {"Bucket": bucket, "Key": key, "ContentType": content_type}
        if metadata:
            kwargs["Metadata"] = {str(k): str(v) for k, v in metadata.items()}

        trace_op("put_object", f"{bucket}/{key}", file=file_path, content_type=content_type)
        with open(file_path, "rb") as body:
            resp = self._s3.put_object(Body=body, **kwargs)
        return _status(resp)

    @convert_errors("GET")
    def get_object(self, bucket: str, key: str):
        """
        Open an object for reading.

        Returns:
            botocore.response.StreamingBody: The object's byte stream. The caller closes it.
        """
        trace_op("get_object", f"{bucket}/{key}")
        return self._s3.get_object(Bucket=bucket, Key=key)["Body"]

    def get_object_text(self, bucket: str, key: str, encoding: str = "utf-8") -> str:
        """Read a whole object and decode it as text."""
        body = self.get_object(bucket, key)
        try:
            return body.read().decode(encoding)
        finally:
            body.close()

    @convert_errors("PRESIGN")
    def generate_presigned_url(self, bucket: str, key: str, expires_at: datetime) -> str:
        """
        Generate a presigned GET URL for one object.

        Args:
            bucket (str): Bucket name.
            key (str): Object key.
            expires_at (datetime): Absolute expiry. Naive values are taken as UTC.

        Returns:
            str: The presigned URL.

        Raises:
            ObjectError: If the expiry is in the past or more than seven days away.
        """
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        expires_in = math.ceil((expires_at - datetime.now(timezone.utc)).total_seconds())
        if expires_in <= 0:
            raise ObjectError("Presigned URL expiry must be in the future", operation="PRESIGN")
        if expires_in > MAX_PRESIGN_SECONDS:
            raise ObjectError("Presigned URL expiry cannot exceed seven days", operation="PRESIGN")

        trace_op("generate_presigned_url", f"{bucket}/{key}", expires_in=expires_in)
        return self._s3.generate_presigned_url(
            ClientMethod="get_object",
            Params={"Bucket": bucket, "Key": key},
            ExpiresIn=expires_in,
        )
