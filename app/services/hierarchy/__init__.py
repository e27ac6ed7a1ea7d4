"""
Hierarchy access control.

Decides whether an actor may view or manage records owned by another actor.
"""

from app.services.hierarchy.resolver import HierarchyResolver, OwnerChain


__all__ = [
    "HierarchyResolver",
    "OwnerChain",
]
