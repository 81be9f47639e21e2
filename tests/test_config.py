import pytest
from pydantic import ValidationError

from s3demo.client.exceptions import ConfigurationError
from s3demo.demo.config import DemoConfig, env_values, parse_metadata
from s3demo.demo.runner import load_config


def test_from_env(source_file):
    config = DemoConfig.from_env({
        "S3DEMO_BUCKET": "mark-test-9702144567",
        "S3DEMO_SOURCE_FILE": source_file,
        "S3DEMO_METADATA": "myVal=lab2-testing-upload, owner=ops",
        "S3DEMO_PROFILE": "app-user",
        "S3DEMO_PAGE_SIZE": "10",
        "S3DEMO_POLL_TIMEOUT": "2.5",
        "S3DEMO_TRACE_OPS": "yes",
        "S3DEMO_LOG_LEVEL": "debug",
    })

    assert config.bucket == "mark-test-9702144567"
    assert config.metadata == {"myVal": "lab2-testing-upload", "owner": "ops"}
    assert config.profile == "app-user"
    assert config.region is None
    assert config.page_size == 10
    assert config.poll_policy.max_wait == 2.5
    assert config.poll_policy.interval == 0.5
    assert config.trace is True
    assert config.log_level == "DEBUG"
    assert config.object_key == "notes.csv"


def test_defaults(source_file):
    config = DemoConfig.from_env({"S3DEMO_BUCKET": "demo-bucket", "S3DEMO_SOURCE_FILE": source_file})
    assert config.page_size == 5
    assert config.url_ttl == 3600
    assert config.metadata == {}
    assert config.keep_bucket is False
    assert config.trace is False


def test_env_values_skips_blank_variables():
    assert env_values({"S3DEMO_BUCKET": " b1 ", "S3DEMO_REGION": "  ", "OTHER": "x"}) == {"bucket": "b1"}


def test_from_env_rejects_non_numbers(source_file):
    with pytest.raises(ConfigurationError) as excinfo:
        DemoConfig.from_env({
            "S3DEMO_BUCKET": "demo-bucket",
            "S3DEMO_SOURCE_FILE": source_file,
            "S3DEMO_PAGE_SIZE": "five",
        })
    assert "page_size" in excinfo.value.message


def test_missing_settings_are_reported_together():
    with pytest.raises(ConfigurationError) as excinfo:
        DemoConfig.from_env({})
    assert "bucket" in excinfo.value.message
    assert "source_file" in excinfo.value.message
    assert excinfo.value.code == "ERR_CONFIG"


def test_parse_metadata():
    assert parse_metadata(["a=1", " b = two ", ""]) == {"a": "1", "b": "two"}
    with pytest.raises(ValueError):
        parse_metadata(["novalue"])
    with pytest.raises(ValueError):
        parse_metadata(["=value"])


def test_malformed_metadata_is_a_configuration_error(source_file):
    with pytest.raises(ConfigurationError) as excinfo:
        DemoConfig.load({"bucket": "demo-bucket", "source_file": source_file, "metadata": "novalue"})
    assert "KEY=VALUE" in excinfo.value.message


@pytest.mark.parametrize("bucket", ["", "ab", "Upper-Case", "-leading", "trailing-", "a..b", "192.168.1.10", "x" * 64])
def test_invalid_bucket_names(bucket, source_file):
    with pytest.raises(ConfigurationError):
        DemoConfig.load({"bucket": bucket, "source_file": source_file})


def test_missing_source_file(tmp_path):
    with pytest.raises(ConfigurationError) as excinfo:
        DemoConfig.load({"bucket": "demo-bucket", "source_file": str(tmp_path / "nope.csv")})
    assert "missing or unreadable" in excinfo.value.message


@pytest.mark.parametrize("overrides", [
    {"page_size": 0},
    {"page_size": 1001},
    {"url_ttl": 0},
    {"url_ttl": 8 * 24 * 3600},
    {"poll_timeout": 0},
    {"poll_interval": -1},
    {"log_level": "LOUD"},
])
def test_out_of_range_settings(overrides, source_file):
    config = DemoConfig(bucket="demo-bucket", source_file=source_file)
    with pytest.raises(ConfigurationError):
        config.with_overrides(**overrides)


def test_config_is_frozen(source_file):
    config = DemoConfig(bucket="demo-bucket", source_file=source_file)
    with pytest.raises(ValidationError):
        config.page_size = 10
    assert config.with_overrides(page_size=10, region=None).page_size == 10
    assert config.page_size == 5


def test_arguments_override_environment(source_file):
    environ = {"S3DEMO_BUCKET": "env-bucket", "S3DEMO_SOURCE_FILE": source_file, "S3DEMO_PAGE_SIZE": "7"}
    config = load_config(
        ["--bucket", "cli-bucket", "--metadata", "k=v", "--metadata", "x=y", "--keep-bucket"],
        environ=environ,
    )

    assert config.bucket == "cli-bucket"
    assert config.page_size == 7
    assert config.metadata == {"k": "v", "x": "y"}
    assert config.keep_bucket is True
    assert config.trace is False
