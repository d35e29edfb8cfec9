"""Assemble the site's resource graph for either topology."""

from __future__ import annotations

import logging
from typing import Iterable

import pulumi

from .access import (
    BUCKET_NODE,
    DISTRIBUTION_NODE,
    ORIGIN_ACCESS_IDENTITY_NODE,
    BucketConfig,
    distribution_config,
    reconcile_bucket_access,
)
from .config import SiteConfig
from .graph import Ref, ResourceGraph, ResourceNode
from .publisher import PublishUnit

logger = logging.getLogger(__name__)

PROVIDER_NODE = "aws-provider"
OWNERSHIP_CONTROLS_NODE = "bucket-ownership-controls"
PUBLIC_ACCESS_BLOCK_NODE = "bucket-public-access-block"
BUCKET_ACL_NODE = "bucket-acl"
BUCKET_POLICY_NODE = "bucket-policy"
OBJECT_PREFIX = "object-"


def object_node_name(key: str) -> str:
    """Resource name for the object at ``key``.

    ``%`` and ``:`` are percent-encoded so a key containing ``::`` cannot
    break the URN, and distinct keys keep distinct names.
    """
    return OBJECT_PREFIX + key.replace("%", "%25").replace(":", "%3A")


def _bucket_nodes(graph: ResourceGraph, bucket: BucketConfig) -> None:
    bucket_id = Ref(BUCKET_NODE, "id")
    graph.add(ResourceNode(
        BUCKET_NODE,
        "bucket",
        inputs={
            "bucket": bucket.name,
            "website": bucket.website.to_dict() if bucket.website else None,
            "tags": dict(bucket.tags),
        },
        provider=PROVIDER_NODE,
    ))
    # ACLs are disabled on new buckets unless ownership is relaxed first.
    graph.add(ResourceNode(
        OWNERSHIP_CONTROLS_NODE,
        "bucket-ownership-controls",
        inputs={
            "bucket": bucket_id,
            "rule": {"object_ownership": "BucketOwnerPreferred"},
        },
        provider=PROVIDER_NODE,
    ))
    block = not bucket.is_public
    graph.add(ResourceNode(
        PUBLIC_ACCESS_BLOCK_NODE,
        "bucket-public-access-block",
        inputs={
            "bucket": bucket_id,
            "block_public_acls": block,
            "block_public_policy": block,
            "ignore_public_acls": block,
            "restrict_public_buckets": block,
        },
        provider=PROVIDER_NODE,
    ))
    graph.add(ResourceNode(
        BUCKET_ACL_NODE,
        "bucket-acl",
        inputs={"bucket": bucket_id, "acl": bucket.access_mode.value},
        depends_on=(OWNERSHIP_CONTROLS_NODE, PUBLIC_ACCESS_BLOCK_NODE),
        provider=PROVIDER_NODE,
    ))
    graph.add(ResourceNode(
        BUCKET_POLICY_NODE,
        "bucket-policy",
        inputs={"bucket": bucket_id, "policy": bucket.policy},
        depends_on=(PUBLIC_ACCESS_BLOCK_NODE,),
        provider=PROVIDER_NODE,
    ))


def build_site_graph(config: SiteConfig, units: Iterable[PublishUnit]) -> ResourceGraph:
    """Return the resource graph for ``config`` with one object node per unit.

    Without a distribution the bucket is a public website. With one, an
    origin access identity and a CloudFront distribution are added and the
    bucket is locked down to that identity.
    """
    graph = ResourceGraph()
    graph.add(ResourceNode(PROVIDER_NODE, "provider", inputs={"region": config.region}))

    if config.enable_distribution:
        graph.add(ResourceNode(
            ORIGIN_ACCESS_IDENTITY_NODE,
            "origin-access-identity",
            inputs={"comment": f"CloudFront access to {config.bucket_name}"},
            provider=PROVIDER_NODE,
        ))

    bucket = reconcile_bucket_access(config, config.enable_distribution)
    _bucket_nodes(graph, bucket)

    if config.enable_distribution:
        graph.add(ResourceNode(
            DISTRIBUTION_NODE,
            "distribution",
            inputs=distribution_config(config).to_inputs(),
            provider=PROVIDER_NODE,
        ))

    count = 0
    for unit in units:
        graph.add(ResourceNode(
            object_node_name(unit.key),
            "bucket-object",
            inputs={
                "bucket": Ref(BUCKET_NODE, "id"),
                "key": unit.key,
                "source": pulumi.FileAsset(unit.local_path),
                "content_type": unit.content_type,
                "etag": unit.fingerprint,
            },
            depends_on=unit.depends_on,
            provider=PROVIDER_NODE,
        ))
        count += 1

    logger.info(
        "planned %d resource(s) for bucket %s: %d object(s), distribution %s",
        len(graph),
        config.bucket_name,
        count,
        "enabled" if config.enable_distribution else "disabled",
    )
    return graph
