"""Typed builder for S3 bucket policy documents."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from .graph import Ref

POLICY_VERSION = "2012-10-17"
GET_OBJECT = "s3:GetObject"

Identifier = Union[str, Ref]


@dataclass(frozen=True)
class Principal:
    """Who a statement applies to. ``kind`` of None means everyone (``"*"``)."""

    kind: Optional[str] = None
    identifiers: tuple[Identifier, ...] = ()

    @classmethod
    def anyone(cls) -> "Principal":
        return cls()

    @classmethod
    def aws(cls, *identifiers: Identifier) -> "Principal":
        return cls("AWS", tuple(identifiers))

    @property
    def is_anonymous(self) -> bool:
        return self.kind is None

    def to_dict(self) -> Union[str, dict[str, Any]]:
        if self.is_anonymous:
            return "*"
        ids = list(self.identifiers)
        return {self.kind: ids[0] if len(ids) == 1 else ids}


@dataclass(frozen=True)
class PolicyStatement:
    principal: Principal
    actions: tuple[str, ...]
    resources: tuple[Identifier, ...]
    effect: str = "Allow"
    sid: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        statement: dict[str, Any] = {}
        if self.sid:
            statement["Sid"] = self.sid
        statement["Effect"] = self.effect
        statement["Principal"] = self.principal.to_dict()
        statement["Action"] = list(self.actions)
        statement["Resource"] = list(self.resources)
        return statement


@dataclass(frozen=True)
class PolicyDocument:
    statements: tuple[PolicyStatement, ...] = field(default_factory=tuple)
    version: str = POLICY_VERSION

    def to_dict(self) -> dict[str, Any]:
        return {
            "Version": self.version,
            "Statement": [s.to_dict() for s in self.statements],
        }

    def to_json(self, **kwargs: Any) -> str:
        """Serialise the document; unresolved references render as ``${node.attr}``."""
        return json.dumps(self.to_dict(), default=str, **kwargs)

    def principals(self) -> list[Principal]:
        return [s.principal for s in self.statements]


def public_read_policy(bucket_arn: str) -> PolicyDocument:
    """Anyone may read any object in the bucket."""
    return PolicyDocument(
        statements=(
            PolicyStatement(
                sid="PublicReadGetObject",
                principal=Principal.anyone(),
                actions=(GET_OBJECT,),
                resources=(f"{bucket_arn}/*",),
            ),
        )
    )


def identity_read_policy(bucket_arn: str, identity: Identifier) -> PolicyDocument:
    """Only ``identity`` (an IAM ARN) may read objects in the bucket."""
    return PolicyDocument(
        statements=(
            PolicyStatement(
                sid="OriginAccessIdentityGetObject",
                principal=Principal.aws(identity),
                actions=(GET_OBJECT,),
                resources=(f"{bucket_arn}/*",),
            ),
        )
    )
