"""Link graph package."""

from .link_graph import LinkGraph

__all__ = ['LinkGraph']
