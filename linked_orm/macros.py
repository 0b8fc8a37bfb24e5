"""
Closed set of relation kinds and the traits each one reports at declaration
time.
"""

from enum import Enum


class RelationKind(Enum):
    REFERENCES_MANY = "references_many"
    REFERENCED_IN = "referenced_in"

    @property
    def macro(self) -> str:
        """Tag used in reflection, e.g. ``references_many``."""
        return self.value

    @property
    def embedded(self) -> bool:
        return False

    @property
    def foreign_key_default(self):
        return None

    @property
    def foreign_key_suffix(self) -> str:
        return "_id"

    @property
    def stores_foreign_key(self) -> bool:
        """True when the declaring side holds the foreign key column itself."""
        return self is RelationKind.REFERENCED_IN

    def builder(self, metadata, obj):
        """Return the builder that turns ``obj`` into this relation's target."""
        from .builders import ManyBuilder, SingleBuilder
        if self is RelationKind.REFERENCES_MANY:
            return ManyBuilder(metadata, obj)
        return SingleBuilder(metadata, obj)

    def nested_builder(self, metadata, attributes, options=None):
        """Return the builder handling nested attribute assignment."""
        from .builders import NestedManyBuilder, NestedOneBuilder
        if self is RelationKind.REFERENCES_MANY:
            return NestedManyBuilder(metadata, attributes, options)
        return NestedOneBuilder(metadata, attributes, options)
