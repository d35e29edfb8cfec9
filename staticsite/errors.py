"""Exceptions raised while planning the static site."""


class SiteError(Exception):
    """Base class for static site planning errors."""


class ConfigError(SiteError, ValueError):
    """A stack configuration value is missing or invalid."""


class PolicyConflict(SiteError):
    """Public website settings and a restrictive policy were produced together.

    Reconciliation never builds such a bucket, so seeing this means the
    reconciliation code is broken.
    """


class GraphError(SiteError):
    """The resource graph has a cycle, a duplicate or a dangling reference."""
