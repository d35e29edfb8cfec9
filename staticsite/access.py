"""Bucket access reconciliation and the CloudFront distribution settings."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Optional

from .config import SiteConfig
from .errors import PolicyConflict
from .graph import Ref
from .policy import PolicyDocument, identity_read_policy, public_read_policy

BUCKET_NODE = "bucket"
ORIGIN_ACCESS_IDENTITY_NODE = "origin-access-identity"
DISTRIBUTION_NODE = "distribution"


class AccessMode(str, enum.Enum):
    PUBLIC_READ = "public-read"
    PRIVATE = "private"


@dataclass(frozen=True)
class WebsiteSettings:
    index_document: str
    error_document: str

    def to_dict(self) -> dict[str, str]:
        return {
            "index_document": self.index_document,
            "error_document": self.error_document,
        }


@dataclass(frozen=True)
class BucketConfig:
    name: str
    access_mode: AccessMode
    website: Optional[WebsiteSettings]
    policy: Optional[PolicyDocument]
    tags: dict[str, str] = field(default_factory=dict)

    @property
    def is_public(self) -> bool:
        return self.access_mode is AccessMode.PUBLIC_READ


def check_exclusive(bucket: BucketConfig) -> BucketConfig:
    """Raise PolicyConflict unless ``bucket`` has exactly one access shape.

    Public buckets carry website settings and an anonymous-read policy.
    Private buckets carry neither and only grant named principals.
    """
    principals = bucket.policy.principals() if bucket.policy else []
    anonymous = [p for p in principals if p.is_anonymous]
    named = [p for p in principals if not p.is_anonymous]

    if bucket.is_public:
        if named or not anonymous:
            raise PolicyConflict(f"public bucket {bucket.name!r} must only grant anonymous reads")
        if bucket.website is None:
            raise PolicyConflict(f"public bucket {bucket.name!r} has no website settings")
    else:
        if anonymous:
            raise PolicyConflict(f"private bucket {bucket.name!r} grants anonymous reads")
        if bucket.website is not None:
            raise PolicyConflict(f"private bucket {bucket.name!r} still serves a website")
        if not named:
            raise PolicyConflict(f"private bucket {bucket.name!r} grants no reader")
    return bucket


def reconcile_bucket_access(config: SiteConfig, has_distribution: bool) -> BucketConfig:
    """Decide how the bucket is exposed.

    Without a distribution the bucket is a public website. With one it is
    private and only the distribution's origin access identity may read it.
    The bucket keeps its name either way, so switching modes updates it in
    place and the uploaded objects are left alone.
    """
    if has_distribution:
        bucket = BucketConfig(
            name=config.bucket_name,
            access_mode=AccessMode.PRIVATE,
            website=None,
            policy=identity_read_policy(
                config.bucket_arn, Ref(ORIGIN_ACCESS_IDENTITY_NODE, "iam_arn")
            ),
            tags=dict(config.tags),
        )
    else:
        bucket = BucketConfig(
            name=config.bucket_name,
            access_mode=AccessMode.PUBLIC_READ,
            website=WebsiteSettings(config.index_document, config.error_document),
            policy=public_read_policy(config.bucket_arn),
            tags=dict(config.tags),
        )
    return check_exclusive(bucket)


@dataclass(frozen=True)
class CacheBehavior:
    allowed_methods: tuple[str, ...] = ("GET", "HEAD", "OPTIONS")
    cached_methods: tuple[str, ...] = ("GET", "HEAD")
    viewer_protocol_policy: str = "redirect-to-https"
    forward_query_string: bool = False
    forward_cookies: str = "none"
    min_ttl: int = 0
    default_ttl: int = 3600
    max_ttl: int = 86400
    compress: bool = True


@dataclass(frozen=True)
class ErrorResponse:
    error_code: int
    response_code: int
    response_page_path: str
    error_caching_min_ttl: int = 10


@dataclass(frozen=True)
class DistributionConfig:
    origin_id: str
    origin_domain: Ref
    access_identity_path: Ref
    default_root_object: str
    cache_behavior: CacheBehavior = field(default_factory=CacheBehavior)
    error_responses: tuple[ErrorResponse, ...] = ()
    geo_restriction: str = "none"
    use_default_certificate: bool = True
    price_class: str = "PriceClass_100"
    tags: dict[str, str] = field(default_factory=dict)

    def to_inputs(self) -> dict[str, Any]:
        """Constructor arguments for ``aws.cloudfront.Distribution``."""
        behavior = self.cache_behavior
        return {
            "enabled": True,
            "is_ipv6_enabled": True,
            "default_root_object": self.default_root_object,
            "price_class": self.price_class,
            "origins": [
                {
                    "origin_id": self.origin_id,
                    "domain_name": self.origin_domain,
                    "s3_origin_config": {
                        "origin_access_identity": self.access_identity_path,
                    },
                }
            ],
            "default_cache_behavior": {
                "target_origin_id": self.origin_id,
                "allowed_methods": list(behavior.allowed_methods),
                "cached_methods": list(behavior.cached_methods),
                "viewer_protocol_policy": behavior.viewer_protocol_policy,
                "compress": behavior.compress,
                "forwarded_values": {
                    "query_string": behavior.forward_query_string,
                    "cookies": {"forward": behavior.forward_cookies},
                },
                "min_ttl": behavior.min_ttl,
                "default_ttl": behavior.default_ttl,
                "max_ttl": behavior.max_ttl,
            },
            "custom_error_responses": [
                {
                    "error_code": r.error_code,
                    "response_code": r.response_code,
                    "response_page_path": r.response_page_path,
                    "error_caching_min_ttl": r.error_caching_min_ttl,
                }
                for r in self.error_responses
            ],
            "restrictions": {
                "geo_restriction": {"restriction_type": self.geo_restriction},
            },
            "viewer_certificate": {
                "cloudfront_default_certificate": self.use_default_certificate,
            },
            "tags": dict(self.tags),
        }


def distribution_config(config: SiteConfig) -> DistributionConfig:
    """CloudFront settings for a single-page site served from the bucket.

    S3 answers 403 for missing keys behind an origin access identity, so both
    403 and 404 serve the index document with a 200 and client-side routing
    takes over.
    """
    page = "/" + config.index_document.lstrip("/")
    return DistributionConfig(
        origin_id=f"{config.bucket_name}-origin",
        origin_domain=Ref(BUCKET_NODE, "bucket_regional_domain_name"),
        access_identity_path=Ref(ORIGIN_ACCESS_IDENTITY_NODE, "cloudfront_access_identity_path"),
        default_root_object=config.index_document,
        error_responses=(
            ErrorResponse(403, 200, page),
            ErrorResponse(404, 200, page),
        ),
        price_class=config.price_class,
        tags=dict(config.tags),
    )
