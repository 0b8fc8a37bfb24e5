from .referenced_many import ReferencedMany


class Relationship:
    """One-to-many accessor placed on the owner class by ``ForeignKey(back_populates=...)``.

    Each owner instance gets one ``ReferencedMany``, created on first access.
    A persisted owner starts with a lazy query scoped by the foreign key, a new
    owner starts with an empty list since nothing in the store can point at it.
    """

    def __init__(self, metadata):
        self.metadata = metadata
        self.name = metadata.name
        self._cache_key = f"_{metadata.name}_relation"

    def __get__(self, obj, owner):
        if obj is None:
            return self

        relation = self.cached(obj)
        if relation is None:
            relation = ReferencedMany(obj, self._initial_target(obj), self.metadata)
            obj.__dict__[self._cache_key] = relation
        return relation

    def __set__(self, obj, value):
        raise AttributeError(
            f"'{self.name}' cannot be assigned directly; "
            f"use 'await {type(obj).__name__.lower()}.{self.name}.substitute(...)'"
        )

    def cached(self, obj):
        """The relation already created for ``obj``, if any."""
        return obj.__dict__.get(self._cache_key)

    def _initial_target(self, obj):
        if obj.new_record:
            return []
        return self.metadata.klass.query().filter_by(**{self.metadata.foreign_key: obj.id})
