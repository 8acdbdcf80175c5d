"""s3vfs configuration.

The filesystem is built from an explicit, immutable S3FileSystemConfig. It
can be read from host-style settings (the keys a CMS keeps in its
application settings) or from the process environment.

Host settings:
    AWSAccessKeyID, AWSSecretAccessKey, AWSBucketName, AWSRegion (required)
    AWSEndpointURL, AWSConnectTimeout, AWSReadWriteTimeout (optional)

Environment Variables:
    S3VFS_ACCESS_KEY_ID, S3VFS_SECRET_ACCESS_KEY, S3VFS_BUCKET_NAME,
    S3VFS_REGION (required)
    S3VFS_ENDPOINT_URL: Endpoint of an S3-compatible store (optional)
    S3VFS_CONNECT_TIMEOUT: Connect timeout in seconds (default: 60)
    S3VFS_READ_TIMEOUT: Read/write timeout in seconds (default: 3600)
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from s3vfs.errors import ConfigurationError, ConfigurationMissingError

logger = logging.getLogger(__name__)

ACCESS_KEY_ID_SETTING = "AWSAccessKeyID"
SECRET_ACCESS_KEY_SETTING = "AWSSecretAccessKey"
BUCKET_NAME_SETTING = "AWSBucketName"
REGION_SETTING = "AWSRegion"
ENDPOINT_URL_SETTING = "AWSEndpointURL"
CONNECT_TIMEOUT_SETTING = "AWSConnectTimeout"
READ_TIMEOUT_SETTING = "AWSReadWriteTimeout"

S3VFS_ACCESS_KEY_ID_ENV = "S3VFS_ACCESS_KEY_ID"
S3VFS_SECRET_ACCESS_KEY_ENV = "S3VFS_SECRET_ACCESS_KEY"
S3VFS_BUCKET_NAME_ENV = "S3VFS_BUCKET_NAME"
S3VFS_REGION_ENV = "S3VFS_REGION"
S3VFS_ENDPOINT_URL_ENV = "S3VFS_ENDPOINT_URL"
S3VFS_CONNECT_TIMEOUT_ENV = "S3VFS_CONNECT_TIMEOUT"
S3VFS_READ_TIMEOUT_ENV = "S3VFS_READ_TIMEOUT"

DEFAULT_CONNECT_TIMEOUT_SECONDS = 60.0
DEFAULT_READ_TIMEOUT_SECONDS = 60.0 * 60
DEFAULT_CACHE_EXPIRY_YEARS = 10
DEFAULT_DISPLAY_URL_TEMPLATE = "https://s3.amazonaws.com/{bucket}/{path}"


@dataclass(frozen=True)
class S3FileSystemConfig:
    """Settings captured once at construction of the filesystem.

    Attributes:
        access_key_id: Store access key.
        secret_access_key: Store secret key. Never included in repr.
        bucket_name: Bucket holding every object of this filesystem.
        region: Region identifier of the bucket.
        endpoint_url: Endpoint of an S3-compatible store, None for AWS.
        connect_timeout_seconds: Connection timeout handed to the store client.
        read_timeout_seconds: Read/write timeout handed to the store client.
        public_read: Upload and copy objects with a public-read ACL.
        cache_expiry_years: How far in the future the Expires hint points.
        display_url_template: Format string for directory display URLs,
            with ``{bucket}`` and ``{path}`` placeholders.
    """

    access_key_id: str
    secret_access_key: str = field(repr=False)
    bucket_name: str
    region: str
    endpoint_url: str | None = None
    connect_timeout_seconds: float = DEFAULT_CONNECT_TIMEOUT_SECONDS
    read_timeout_seconds: float = DEFAULT_READ_TIMEOUT_SECONDS
    public_read: bool = True
    cache_expiry_years: int = DEFAULT_CACHE_EXPIRY_YEARS
    display_url_template: str = DEFAULT_DISPLAY_URL_TEMPLATE

    def __post_init__(self) -> None:
        for setting, value in (
            (ACCESS_KEY_ID_SETTING, self.access_key_id),
            (SECRET_ACCESS_KEY_SETTING, self.secret_access_key),
            (BUCKET_NAME_SETTING, self.bucket_name),
            (REGION_SETTING, self.region),
        ):
            if not value or not value.strip():
                raise ConfigurationMissingError(setting)
        if self.connect_timeout_seconds <= 0:
            raise ConfigurationError(
                "Connect timeout must be positive", setting=CONNECT_TIMEOUT_SETTING
            )
        if self.read_timeout_seconds <= 0:
            raise ConfigurationError("Read timeout must be positive", setting=READ_TIMEOUT_SETTING)

    @classmethod
    def from_settings(cls, settings: Mapping[str, str]) -> S3FileSystemConfig:
        """Build configuration from host-style application settings.

        Raises:
            ConfigurationMissingError: If a required setting is missing or blank.
            ConfigurationError: If an optional setting has an invalid value.
        """
        return cls(
            access_key_id=_require(settings, ACCESS_KEY_ID_SETTING),
            secret_access_key=_require(settings, SECRET_ACCESS_KEY_SETTING),
            bucket_name=_require(settings, BUCKET_NAME_SETTING),
            region=_require(settings, REGION_SETTING),
            endpoint_url=(settings.get(ENDPOINT_URL_SETTING) or "").strip() or None,
            connect_timeout_seconds=_get_seconds(
                settings, CONNECT_TIMEOUT_SETTING, DEFAULT_CONNECT_TIMEOUT_SECONDS
            ),
            read_timeout_seconds=_get_seconds(
                settings, READ_TIMEOUT_SETTING, DEFAULT_READ_TIMEOUT_SECONDS
            ),
        )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> S3FileSystemConfig:
        """Build configuration from S3VFS_* environment variables.

        Raises:
            ConfigurationMissingError: Naming the missing environment variable.
            ConfigurationError: If a timeout is not a positive number.
        """
        env = os.environ if environ is None else environ
        config = cls(
            access_key_id=_require(env, S3VFS_ACCESS_KEY_ID_ENV),
            secret_access_key=_require(env, S3VFS_SECRET_ACCESS_KEY_ENV),
            bucket_name=_require(env, S3VFS_BUCKET_NAME_ENV),
            region=_require(env, S3VFS_REGION_ENV),
            endpoint_url=(env.get(S3VFS_ENDPOINT_URL_ENV) or "").strip() or None,
            connect_timeout_seconds=_get_seconds(
                env, S3VFS_CONNECT_TIMEOUT_ENV, DEFAULT_CONNECT_TIMEOUT_SECONDS
            ),
            read_timeout_seconds=_get_seconds(
                env, S3VFS_READ_TIMEOUT_ENV, DEFAULT_READ_TIMEOUT_SECONDS
            ),
        )
        logger.debug(
            "Loaded configuration from environment: bucket=%s region=%s endpoint=%s",
            config.bucket_name,
            config.region,
            config.endpoint_url,
        )
        return config

    def display_url(self, key: str) -> str:
        """Return the public display URL for an object key."""
        return self.display_url_template.format(bucket=self.bucket_name, path=key)


def _require(settings: Mapping[str, str], name: str) -> str:
    value = settings.get(name)
    if value is None or not value.strip():
        raise ConfigurationMissingError(name)
    return value.strip()


def _get_seconds(settings: Mapping[str, str], name: str, default: float) -> float:
    raw = settings.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        seconds = float(raw)
    except ValueError as e:
        raise ConfigurationError(
            f"{name} must be a number of seconds, got {raw!r}", setting=name
        ) from e
    if seconds <= 0:
        raise ConfigurationError(f"{name} must be positive, got {raw!r}", setting=name)
    return seconds
