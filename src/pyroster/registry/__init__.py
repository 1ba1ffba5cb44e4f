"""Registry reconciliation.

Matches live lookup records to roster entities and folds them into a
registry that always holds exactly one record per roster entity.
"""

from pyroster.registry.matcher import match_entity
from pyroster.registry.merge import Registry, merge_registry, placeholder_record

__all__ = ["Registry", "match_entity", "merge_registry", "placeholder_record"]
