"""Stack configuration for the static site."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Optional

import pulumi

from .errors import ConfigError

DEFAULT_REGION = "us-west-1"
DEFAULT_SOURCE_DIR = "../web/build"
DEFAULT_TAGS = {"ManagedBy": "pulumi", "Environment": "dev"}
PRICE_CLASSES = ("PriceClass_100", "PriceClass_200", "PriceClass_All")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class FingerprintMode(str, enum.Enum):
    """How an object's change fingerprint is computed."""

    TIMESTAMP = "timestamp"
    CONTENT = "content"


@dataclass(frozen=True)
class SiteConfig:
    """Everything the plan needs to know about one deployment."""

    bucket_name: str
    region: str = DEFAULT_REGION
    index_document: str = "index.html"
    error_document: str = "index.html"
    enable_distribution: bool = False
    source_dir: str = DEFAULT_SOURCE_DIR
    fingerprint_mode: FingerprintMode = FingerprintMode.TIMESTAMP
    price_class: str = "PriceClass_100"
    tags: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_TAGS))
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if not self.bucket_name:
            raise ConfigError("bucketName must not be empty")
        if not self.index_document:
            raise ConfigError("indexDocument must not be empty")
        if not self.error_document:
            raise ConfigError("errorDocument must not be empty")
        if self.price_class not in PRICE_CLASSES:
            raise ConfigError(
                f"priceClass must be one of {', '.join(PRICE_CLASSES)}, got {self.price_class!r}"
            )
        if self.log_level not in LOG_LEVELS:
            raise ConfigError(
                f"logLevel must be one of {', '.join(LOG_LEVELS)}, got {self.log_level!r}"
            )

    @property
    def bucket_arn(self) -> str:
        return f"arn:aws:s3:::{self.bucket_name}"


def _fingerprint_mode(value: Optional[str]) -> FingerprintMode:
    if value is None:
        return FingerprintMode.TIMESTAMP
    try:
        return FingerprintMode(value.lower())
    except ValueError:
        modes = ", ".join(m.value for m in FingerprintMode)
        raise ConfigError(f"fingerprintMode must be one of {modes}, got {value!r}") from None


def load_site_config(
    cfg: Optional[Any] = None,
    aws_cfg: Optional[Any] = None,
) -> SiteConfig:
    """Build a SiteConfig from Pulumi stack configuration.

    Args:
        cfg: Project config namespace, defaults to ``pulumi.Config("staticsite")``
        aws_cfg: Provider config namespace, defaults to ``pulumi.Config("aws")``

    Returns:
        Validated site configuration
    """
    cfg = cfg if cfg is not None else pulumi.Config("staticsite")
    aws_cfg = aws_cfg if aws_cfg is not None else pulumi.Config("aws")

    region = cfg.get("region") or aws_cfg.get("region") or DEFAULT_REGION
    enable_distribution = cfg.get_bool("enableDistribution")
    tags = cfg.get_object("tags")

    return SiteConfig(
        bucket_name=cfg.require("bucketName"),
        region=region,
        index_document=cfg.get("indexDocument") or "index.html",
        error_document=cfg.get("errorDocument") or "index.html",
        enable_distribution=bool(enable_distribution),
        source_dir=cfg.get("sourceDir") or DEFAULT_SOURCE_DIR,
        fingerprint_mode=_fingerprint_mode(cfg.get("fingerprintMode")),
        price_class=cfg.get("priceClass") or "PriceClass_100",
        tags=dict(tags) if tags is not None else dict(DEFAULT_TAGS),
        log_level=(cfg.get("logLevel") or "INFO").upper(),
    )
