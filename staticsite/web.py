"""Declare a planned resource graph as Pulumi resources."""

from __future__ import annotations

import logging
from typing import Any, Callable

import pulumi
import pulumi_aws as aws

from .access import BUCKET_NODE, DISTRIBUTION_NODE
from .errors import GraphError
from .graph import Ref, ResourceGraph, ResourceNode
from .policy import PolicyDocument

logger = logging.getLogger(__name__)

RESOURCE_TYPES: dict[str, Callable[..., pulumi.CustomResource]] = {
    "provider": aws.Provider,
    "bucket": aws.s3.Bucket,
    "bucket-ownership-controls": aws.s3.BucketOwnershipControls,
    "bucket-public-access-block": aws.s3.BucketPublicAccessBlock,
    "bucket-acl": aws.s3.BucketAclV2,
    "bucket-policy": aws.s3.BucketPolicy,
    "bucket-object": aws.s3.BucketObject,
    "origin-access-identity": aws.cloudfront.OriginAccessIdentity,
    "distribution": aws.cloudfront.Distribution,
}


def resolve(value: Any, declared: dict[str, pulumi.Resource]) -> Any:
    """Replace every Ref in ``value`` with the output it points at."""
    if isinstance(value, Ref):
        return getattr(declared[value.node], value.attribute)
    if isinstance(value, PolicyDocument):
        return pulumi.Output.json_dumps(resolve(value.to_dict(), declared))
    if isinstance(value, dict):
        return {k: resolve(v, declared) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [resolve(v, declared) for v in value]
    return value


def _declare(node: ResourceNode, declared: dict[str, pulumi.Resource]) -> pulumi.Resource:
    try:
        resource_type = RESOURCE_TYPES[node.kind]
    except KeyError:
        raise GraphError(f"unknown resource kind {node.kind!r} for {node.name!r}") from None

    opts = pulumi.ResourceOptions(
        depends_on=[declared[name] for name in node.depends_on],
        provider=declared[node.provider] if node.provider else None,
    )
    return resource_type(node.name, **resolve(node.inputs, declared), opts=opts)


def declare_site(graph: ResourceGraph) -> dict[str, pulumi.Resource]:
    """Create every node of ``graph`` in topological order.

    Returns:
        Declared resources keyed by node name
    """
    declared: dict[str, pulumi.Resource] = {}
    for name in graph.topological_order():
        node = graph[name]
        declared[name] = _declare(node, declared)
        logger.debug("declared %s (%s)", name, node.kind)

    objects = len(graph.nodes("bucket-object"))
    pulumi.log.info(f"declared {len(declared)} resource(s), {objects} of them bucket objects")
    return declared


def export_endpoints(resources: dict[str, pulumi.Resource]) -> dict[str, pulumi.Output]:
    """Export the bucket name and whichever site URL the topology provides."""
    bucket = resources[BUCKET_NODE]
    outputs: dict[str, pulumi.Output] = {"bucket_name": bucket.id}

    distribution = resources.get(DISTRIBUTION_NODE)
    if distribution is not None:
        outputs["cdn_url"] = pulumi.Output.concat("https://", distribution.domain_name)
    else:
        outputs["website_url"] = pulumi.Output.concat("http://", bucket.website_endpoint)

    for name, value in outputs.items():
        pulumi.export(name, value)
    return outputs
