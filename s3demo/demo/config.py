# Copyright 2025 Accelerated Cloud Storage Corporation. All Rights Reserved.
"""Demo configuration loaded from environment variables and command-line arguments."""

import logging
import os
import re
from typing import Any, Dict, Iterable, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..client.client import MAX_LIST_KEYS, MAX_PRESIGN_SECONDS
from ..client.exceptions import ConfigurationError
from ..client.types import PollPolicy

BUCKET_NAME_RE = re.compile(r"^[a-z0-9][a-z0-9.-]{1,61}[a-z0-9]$")
IP_ADDRESS_RE = re.compile(r"^\d{1,3}(\.\d{1,3}){3}$")

# Field name -> environment variable
ENV_VARS = {
    "bucket": "S3DEMO_BUCKET",
    "source_file": "S3DEMO_SOURCE_FILE",
    "content_type": "S3DEMO_CONTENT_TYPE",
    "metadata": "S3DEMO_METADATA",
    "profile": "S3DEMO_PROFILE",
    "region": "S3DEMO_REGION",
    "endpoint_url": "S3DEMO_ENDPOINT_URL",
    "page_size": "S3DEMO_PAGE_SIZE",
    "url_ttl": "S3DEMO_URL_TTL",
    "poll_timeout": "S3DEMO_POLL_TIMEOUT",
    "trace": "S3DEMO_TRACE_OPS",
    "log_level": "S3DEMO_LOG_LEVEL",
}


def parse_metadata(entries: Iterable[str]) -> Dict[str, str]:
    """
    Parse ``KEY=VALUE`` entries into a metadata mapping.

    Raises:
        ValueError: If an entry has no '=' or an empty key.
    """
    metadata = {}
    for entry in entries:
        entry = entry.strip()
        if not entry:
            continue
        key, sep, value = entry.partition("=")
        key = key.strip()
        if not sep or not key:
            raise ValueError(f"Metadata entry must look like KEY=VALUE, got '{entry}'")
        metadata[key] = value.strip()
    return metadata


def env_values(environ: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """Collect the non-empty ``S3DEMO_*`` variables, keyed by field name."""
    environ = os.environ if environ is None else environ
    values = {}
    for name, var in ENV_VARS.items():
        raw = environ.get(var, "").strip()
        if raw:
            values[name] = raw
    return values


def _describe(error: ValidationError) -> str:
    parts = []
    for err in error.errors():
        field = ".".join(str(loc) for loc in err["loc"])
        parts.append(f"{field}: {err['msg']}" if field else err["msg"])
    return "; ".join(parts)


class DemoConfig(BaseModel):
    """Settings for one run of the demo workflow."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    bucket: str
    source_file: str
    content_type: Optional[str] = None
    metadata: Dict[str, str] = Field(default_factory=dict)
    profile: Optional[str] = None
    region: Optional[str] = None
    endpoint_url: Optional[str] = None
    page_size: int = Field(default=5, ge=1, le=MAX_LIST_KEYS)
    url_ttl: int = Field(default=3600, gt=0, le=MAX_PRESIGN_SECONDS)
    poll_timeout: float = Field(default=60.0, gt=0)
    poll_interval: float = Field(default=0.5, gt=0)
    keep_bucket: bool = False
    trace: bool = False
    log_level: str = "INFO"

    @field_validator("bucket")
    @classmethod
    def _validate_bucket(cls, value: str) -> str:
        """Apply the S3 bucket naming rules."""
        value = value.strip()
        if not value:
            raise ValueError("a bucket name is required (--bucket or S3DEMO_BUCKET)")
        if not BUCKET_NAME_RE.match(value) or ".." in value or IP_ADDRESS_RE.match(value):
            raise ValueError(f"invalid bucket name '{value}'")
        return value

    @field_validator("source_file")
    @classmethod
    def _validate_source_file(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("a source file is required (--source-file or S3DEMO_SOURCE_FILE)")
        if not os.path.isfile(value) or not os.access(value, os.R_OK):
            raise ValueError(f"source file is missing or unreadable: '{value}'")
        return value

    @field_validator("metadata", mode="before")
    @classmethod
    def _parse_metadata(cls, value: Any) -> Any:
        """Accept a comma-separated string or a list of KEY=VALUE entries."""
        if isinstance(value, str):
            return parse_metadata(value.split(","))
        if isinstance(value, (list, tuple)):
            return parse_metadata(value)
        return value

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        value = value.strip().upper()
        if not isinstance(logging.getLevelName(value), int):
            raise ValueError(f"unknown log level '{value}'")
        return value

    @classmethod
    def load(cls, values: Mapping[str, Any]) -> "DemoConfig":
        """
        Build and validate a configuration.

        Raises:
            ConfigurationError: If any setting is missing or invalid.
        """
        try:
            return cls.model_validate(dict(values))
        except ValidationError as e:
            raise ConfigurationError(_describe(e)) from e

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "DemoConfig":
        """Build a configuration from ``S3DEMO_*`` environment variables."""
        return cls.load(env_values(environ))

    def with_overrides(self, **overrides) -> "DemoConfig":
        """Return a validated copy with every non-None override applied."""
        values = self.model_dump()
        values.update({k: v for k, v in overrides.items() if v is not None})
        return self.load(values)

    @property
    def object_key(self) -> str:
        return os.path.basename(self.source_file)

    @property
    def poll_policy(self) -> PollPolicy:
        return PollPolicy(interval=self.poll_interval, max_wait=self.poll_timeout)
