import logging
import threading

from conftest import FakeStorageClient
from s3demo.demo import runner
from s3demo.demo.config import DemoConfig
from s3demo.client.types import ObjectSummary
from s3demo.utils import logger, trace_op
from datetime import datetime


def make_config(source_file, **overrides):
    config = DemoConfig(
        bucket="demo-bucket",
        source_file=source_file,
        metadata={"myVal": "lab2-testing-upload"},
        poll_interval=0.001,
        poll_timeout=1.0,
    )
    return config.with_overrides(**overrides)


def test_full_demo_creates_and_removes_bucket(source_file, capsys):
    client = FakeStorageClient(visibility_delay=2)

    assert runner.run_demo(make_config(source_file), client) == runner.EXIT_OK

    out = capsys.readouterr().out
    assert "Successfully created bucket: demo-bucket." in out
    assert "Buckets owner - demo-owner" in out
    assert "Listing the contents of demo-bucket:" in out
    assert "notes.csv" in out
    assert "Presigned URL = https://fake.example/demo-bucket/notes.csv" in out
    assert "Successfully deleted bucket: demo-bucket." in out
    assert "demo-bucket" not in client.buckets


def test_demo_reuses_existing_bucket_and_can_keep_it(source_file, capsys):
    client = FakeStorageClient()
    client.add_bucket("demo-bucket", ["old.txt"])

    assert runner.run_demo(make_config(source_file, keep_bucket=True), client) == runner.EXIT_OK

    out = capsys.readouterr().out
    assert "Bucket demo-bucket already exists." in out
    assert "Keeping bucket: demo-bucket." in out
    assert sorted(client.buckets["demo-bucket"]) == ["notes.csv", "old.txt"]


def test_demo_halts_at_failed_step(source_file, capsys):
    client = FakeStorageClient()
    client.create_status = 500

    assert runner.run_demo(make_config(source_file), client) == runner.EXIT_STEP_FAILED

    out = capsys.readouterr().out
    assert "Could not create bucket" in out
    assert "Buckets owner" not in out


def test_demo_reports_failed_object_deletes(source_file, capsys):
    client = FakeStorageClient()
    client.add_bucket("demo-bucket", ["locked.txt"])
    client.fail_delete_keys = {"locked.txt"}

    assert runner.run_demo(make_config(source_file), client) == runner.EXIT_STEP_FAILED

    out = capsys.readouterr().out
    assert "Could not delete bucket" in out
    assert "demo-bucket" in client.buckets


def test_demo_honours_cancellation(source_file, capsys):
    client = FakeStorageClient(visibility_delay=10_000)
    cancel = threading.Event()
    cancel.set()

    code = runner.run_demo(make_config(source_file), client, cancel_event=cancel)

    assert code == runner.EXIT_STEP_FAILED
    assert "ERR_CANCELLED" in capsys.readouterr().out


def test_format_object_line():
    line = runner.format_object_line(ObjectSummary("notes.csv", datetime(2025, 1, 2), 42))
    assert line == "notes.csv".ljust(35) + "2025-01-02" + "42".rjust(10)


def test_main_rejects_bad_configuration(capsys, monkeypatch):
    monkeypatch.delenv("S3DEMO_BUCKET", raising=False)
    monkeypatch.delenv("S3DEMO_SOURCE_FILE", raising=False)

    assert runner.main(["--bucket", "Bad_Name"]) == runner.EXIT_BAD_CONFIG
    assert "ERR_CONFIG" in capsys.readouterr().out


def test_main_closes_client(source_file, monkeypatch):
    client = FakeStorageClient()
    monkeypatch.setattr(runner, "S3Client", lambda session: client)
    monkeypatch.setattr(runner, "setup_signal_handlers", lambda event: None)
    monkeypatch.setattr(runner, "configure_logging", lambda level: None)

    code = runner.main(["--bucket", "demo-bucket", "--source-file", source_file, "--poll-timeout", "1"])

    assert code == runner.EXIT_OK
    assert client.closed is True


def test_trace_flag_makes_operation_traces_visible(source_file, monkeypatch, caplog):
    class TracingClient(FakeStorageClient):
        def bucket_exists(self, bucket):
            trace_op("head_bucket", bucket)
            return super().bucket_exists(bucket)

    client = TracingClient()
    monkeypatch.setattr(runner, "S3Client", lambda session: client)
    monkeypatch.setattr(runner, "setup_signal_handlers", lambda event: None)
    monkeypatch.setenv("S3DEMO_TRACE_OPS", "false")
    monkeypatch.setenv("S3DEMO_LOG_LEVEL", "WARNING")
    original_level = logger.level
    try:
        code = runner.main(["--bucket", "demo-bucket", "--source-file", source_file,
                            "--poll-timeout", "1", "--trace"])
    finally:
        logger.setLevel(original_level)

    assert code == runner.EXIT_OK
    traces = [r for r in caplog.records if r.getMessage().startswith("TRACE: head_bucket on demo-bucket")]
    assert traces, "no TRACE records were logged"
    assert all(r.levelno == logging.DEBUG for r in traces)
