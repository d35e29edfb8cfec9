"""Publish a static build directory to an S3 website, optionally behind CloudFront."""

from .access import BucketConfig, DistributionConfig, reconcile_bucket_access
from .config import FingerprintMode, SiteConfig, load_site_config
from .plan import build_site_graph
from .publisher import Publisher, PublishUnit, SourceTree

__all__ = [
    "BucketConfig",
    "DistributionConfig",
    "FingerprintMode",
    "Publisher",
    "PublishUnit",
    "SiteConfig",
    "SourceTree",
    "build_site_graph",
    "load_site_config",
    "reconcile_bucket_access",
]
