from dataclasses import dataclass, field

from .macros import RelationKind


@dataclass(frozen=True)
class RelationMetadata:
    """Immutable description of one declared relation.

    Built once when the foreign key is resolved and shared by every relation
    instance of that declaration.

    Attributes:
        name: Accessor name on the declaring class (``posts`` or ``author``).
        kind: The relation kind tag.
        owner_class: Class the relation hangs off.
        klass: Class on the other side of the relation.
        foreign_key: Name of the foreign key field on the child class.
        inverse_name: Name of the child's accessor pointing back at the owner.
    """
    name: str
    kind: RelationKind
    owner_class: type
    klass: type
    foreign_key: str
    inverse_name: str
    foreign_key_field: object = field(repr=False, compare=False, default=None)
    inverse_field: object = field(repr=False, compare=False, default=None)

    @property
    def macro(self):
        return self.kind.macro

    @property
    def embedded(self):
        return self.kind.embedded

    @property
    def stores_foreign_key(self):
        return self.kind.stores_foreign_key

    def builder(self, obj):
        return self.kind.builder(self, obj)

    def nested_builder(self, attributes, options=None):
        return self.kind.nested_builder(self, attributes, options)

    # Capability accessors on the child side. The descriptors are resolved
    # at declaration time, so no attribute lookup by name happens per call.

    def get_foreign_key(self, child):
        return self.foreign_key_field.__get__(child, type(child))

    def set_foreign_key(self, child, value):
        self.foreign_key_field.__set__(child, value)

    def get_inverse(self, child):
        return self.inverse_field.__get__(child, type(child))

    def set_inverse(self, child, owner):
        self.inverse_field.link(child, owner)
