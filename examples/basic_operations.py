# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
from s3demo.client import S3Client, Session, BucketLifecycleCoordinator
from datetime import datetime, timedelta, timezone
import os
import uuid

def main():
    # Create a new client; credentials come from the default profile chain
    client = S3Client(Session(region="us-east-1"))
    coordinator = BucketLifecycleCoordinator(client)

    try:
        # Create a bucket and wait until it is visible
        bucket = f"my-test-bucket-{uuid.uuid4()}"
        coordinator.create(bucket)
        print(f"Created bucket: {bucket}")

        # Upload an object from a local file
        with open("hello.txt", "w") as f:
            f.write("Hello, World!")
        try:
            client.put_object(bucket, "hello.txt", "hello.txt", metadata={"myVal": "example"})
            print("Uploaded object: hello.txt")
        finally:
            os.remove("hello.txt")

        # Download the object
        downloaded = client.get_object_text(bucket, "hello.txt")
        print(f"Downloaded content: {downloaded}")

        # List objects in the bucket
        print("Objects in bucket:")
        for obj in coordinator.list_all(bucket):
            print(f"- {obj.key} ({obj.size} bytes, modified {obj.last_modified})")

        # Share the object for ten minutes
        url = client.generate_presigned_url(bucket, "hello.txt", datetime.now(timezone.utc) + timedelta(minutes=10))
        print(f"Presigned URL: {url}")

        # Delete the object and the bucket
        coordinator.destroy(bucket)
        print(f"Deleted bucket: {bucket}")

    finally:
        client.close()

if __name__ == "__main__":
    main()
