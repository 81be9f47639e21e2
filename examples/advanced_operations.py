# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
from s3demo.client import S3Client, Session, BucketLifecycleCoordinator, PollPolicy
from s3demo.client.exceptions import CreateError, DeleteError, ReadinessTimeout
import os
import tempfile
import threading
import uuid

def main():
    # Talk to a local S3-compatible service if one is configured
    session = Session(endpoint_url=os.environ.get("S3DEMO_ENDPOINT_URL"))
    cancel = threading.Event()

    with S3Client(session) as client:
        coordinator = BucketLifecycleCoordinator(
            client,
            poll_policy=PollPolicy(interval=0.5, max_wait=30),
            on_state_change=lambda bucket, state: print(f"[{bucket}] {state.value}"),
            max_workers=16,
        )

        # Create a bucket with error handling
        bucket = f"my-test-bucket-{uuid.uuid4()}"
        try:
            coordinator.create(bucket, cancel_event=cancel)
        except (CreateError, ReadinessTimeout) as e:
            print(f"Failed to create bucket: {e}")
            return

        # Upload enough objects to need several listing pages
        with tempfile.NamedTemporaryFile("wb", suffix=".dat", delete=False) as f:
            f.write(b"Sample data for paginated listing." * 32)
            source = f.name
        try:
            for i in range(25):
                client.put_object(bucket, f"batch/object-{i:03d}.dat", source)
        finally:
            os.remove(source)

        # Walk the bucket page by page
        for number, page in enumerate(coordinator.list_pages(bucket, page_size=10), start=1):
            print(f"Page {number}: {len(page.items)} objects, truncated={page.truncated}")

        # Deleting a bucket that still has objects fails
        try:
            coordinator.delete(bucket)
        except DeleteError as e:
            print(f"Expected failure: {e}")

        # Bulk delete objects, then the bucket
        try:
            deleted = coordinator.destroy(bucket, page_size=10, cancel_event=cancel)
            print(f"Deleted {deleted} objects and bucket {bucket}")
        except DeleteError as e:
            print(f"Failed to delete some objects: {e.failed_keys}")

if __name__ == "__main__":
    main()
