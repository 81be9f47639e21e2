# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""
Demo workflow for s3demo.

Runs the fixed demonstration sequence against a storage service: make sure the
bucket exists, list buckets, upload a file with metadata, list the bucket's
contents, print a presigned URL for the upload, then empty and delete the bucket.

Usage:
    python -m s3demo --bucket my-demo-bucket --source-file notes.csv

    # Keep the bucket and its contents afterwards
    python -m s3demo --bucket my-demo-bucket --source-file notes.csv --keep-bucket
"""

import argparse
import logging
import os
import signal
import sys
import threading
import time
from datetime import datetime, timedelta, timezone

from ..client.client import S3Client, Session
from ..client.exceptions import ConfigurationError, S3DemoError
from ..client.lifecycle import BucketLifecycleCoordinator
from ..utils import configure_logging, logger, time_function
from .config import DemoConfig, env_values

EXIT_OK = 0
EXIT_STEP_FAILED = 1
EXIT_BAD_CONFIG = 2

SEPARATOR = "--------------------------------------"


class StepFailed(Exception):
    """A demo step failed and the workflow stopped."""
    def __init__(self, step: str, cause: S3DemoError):
        self.step = step
        self.cause = cause
        super().__init__(f"{step} failed: {cause}")


def _step(name, func, *args, **kwargs):
    try:
        return func(*args, **kwargs)
    except S3DemoError as e:
        logger.error(f"Step '{name}' failed: {e}")
        raise StepFailed(name, e) from e


def format_object_line(obj) -> str:
    """Format one listing entry as a fixed-width table row."""
    date = obj.last_modified.strftime("%Y-%m-%d") if obj.last_modified else ""
    return f"{obj.key:<35}{date:>10}{obj.size:>10}"


def print_buckets(client: S3Client):
    output = client.list_buckets()
    print(f"Buckets owner - {output.owner or 'unknown'}")
    for bucket in output.buckets:
        print(f"Bucket {bucket.name}, Created on {bucket.creation_date}")


def print_bucket_contents(coordinator: BucketLifecycleCoordinator, bucket: str, page_size: int) -> int:
    print(SEPARATOR)
    print(f"Listing the contents of {bucket}:")
    print(SEPARATOR)
    count = 0
    for obj in coordinator.list_all(bucket, page_size=page_size):
        print(format_object_line(obj))
        count += 1
    return count


def run_demo(config: DemoConfig, client: S3Client, cancel_event: threading.Event = None) -> int:
    """
    Run the demo sequence.

    Args:
        config (DemoConfig): Validated configuration.
        client (S3Client): Storage client; owned by the caller.
        cancel_event (threading.Event, optional): Stops the readiness poll and bucket emptying.

    Returns:
        int: Process exit status.
    """
    start_time = time.time()
    bucket = config.bucket
    coordinator = BucketLifecycleCoordinator(client, poll_policy=config.poll_policy)
    print("S3 Python Client Demo")

    try:
        created = _step("create bucket", coordinator.ensure_ready, bucket, cancel_event=cancel_event)
        if created:
            print(f"Successfully created bucket: {bucket}.\n")
        else:
            print(f"Bucket {bucket} already exists.\n")

        _step("list buckets", print_buckets, client)

        key = config.object_key
        _step(
            "upload object",
            client.put_object,
            bucket,
            key,
            config.source_file,
            content_type=config.content_type,
            metadata=config.metadata,
        )
        print(f"Uploaded {config.source_file} as {key}")

        _step("list bucket contents", print_bucket_contents, coordinator, bucket, config.page_size)

        expires_at = datetime.now(timezone.utc) + timedelta(seconds=config.url_ttl)
        url = _step("generate presigned URL", client.generate_presigned_url, bucket, key, expires_at)
        print(f"Presigned URL = {url}")

        if config.keep_bucket:
            print(f"Keeping bucket: {bucket}.\n")
        else:
            deleted = _step(
                "delete bucket",
                coordinator.destroy,
                bucket,
                page_size=config.page_size,
                cancel_event=cancel_event,
            )
            print(f"Deleted {deleted} objects.")
            print(f"Successfully deleted bucket: {bucket}.\n")
    except StepFailed as e:
        print(f"Could not {e.step}: {e.cause}")
        time_function("run_demo", start_time)
        return EXIT_STEP_FAILED

    time_function("run_demo", start_time)
    return EXIT_OK


def setup_signal_handlers(cancel_event: threading.Event):
    """
    Set SIGINT and SIGTERM to cancel the running workflow instead of killing it.

    Args:
        cancel_event (threading.Event): Event set when a signal arrives

    Returns:
        callable: The signal handler function
    """
    def signal_handler(sig, frame):
        logger.info(f"Signal {sig} received, cancelling...")
        print("Signal received, cancelling...")
        cancel_event.set()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    return signal_handler


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Run the bucket lifecycle demo against an S3-compatible service')
    parser.add_argument('--bucket', help='Bucket to create, populate and delete (S3DEMO_BUCKET)')
    parser.add_argument('--source-file', help='Local file to upload (S3DEMO_SOURCE_FILE)')
    parser.add_argument('--content-type', help='MIME type of the upload; guessed from the file name by default')
    parser.add_argument('--metadata', action='append', metavar='KEY=VALUE',
                        help='User metadata for the upload; may be repeated')
    parser.add_argument('--profile', help='Credentials profile name (S3DEMO_PROFILE)')
    parser.add_argument('--region', help='Region (S3DEMO_REGION)')
    parser.add_argument('--endpoint-url', help='Endpoint of an S3-compatible service (S3DEMO_ENDPOINT_URL)')
    parser.add_argument('--page-size', type=int, help='Keys per listing request (default 5)')
    parser.add_argument('--url-ttl', type=int, help='Presigned URL lifetime in seconds (default 3600)')
    parser.add_argument('--poll-timeout', type=float,
                        help='Seconds to wait for a new bucket to become visible (default 60)')
    parser.add_argument('--keep-bucket', action='store_true', default=None,
                        help='Do not empty and delete the bucket at the end')
    parser.add_argument('--trace', action='store_true', default=None,
                        help='Enable detailed tracing of storage operations for debugging')
    parser.add_argument('--log-level', help='Log level (default INFO)')
    return parser


def load_config(argv=None, environ=None) -> DemoConfig:
    """
    Combine environment variables and command-line arguments; arguments win.

    Raises:
        ConfigurationError: If the result is invalid.
    """
    args = build_parser().parse_args(argv)
    values = env_values(environ)
    values.update({k: v for k, v in vars(args).items() if v is not None})
    return DemoConfig.load(values)


def main(argv=None) -> int:
    """
    CLI entry point for the demo.

    Returns:
        int: 0 on success, 1 if a step failed, 2 on invalid configuration.
    """
    try:
        config = load_config(argv)
    except ConfigurationError as e:
        print(f"Error: {e}")
        return EXIT_BAD_CONFIG

    # Traces are logged at DEBUG
    configure_logging(logging.DEBUG if config.trace else config.log_level)
    if config.trace:
        os.environ['S3DEMO_TRACE_OPS'] = 'true'
        print("Detailed operation tracing enabled")
    logger.info(f"Starting s3demo with bucket {config.bucket} and source file {config.source_file}")

    cancel_event = threading.Event()
    setup_signal_handlers(cancel_event)

    try:
        client = S3Client(Session(profile=config.profile, region=config.region, endpoint_url=config.endpoint_url))
    except ConfigurationError as e:
        print(f"Error: {e}")
        return EXIT_BAD_CONFIG

    try:
        return run_demo(config, client, cancel_event=cancel_event)
    finally:
        client.close()


if __name__ == '__main__':
    sys.exit(main())
