from .errors import InvalidRelation
from .field import Field
from .macros import RelationKind
from .metadata import RelationMetadata
from .naming import inverse_name

class ForeignKey(Field):
    def __init__(self, target, back_populates=None, inverse_of=None, target_column="id", nullable=True):
        """
        Args:
            target: Target (owner) entity class, class name, or a callable returning the class
            back_populates: Name of the one-to-many relation created on the target class
            inverse_of: Name of the accessor on this class pointing at the owner;
                defaults to the field name without its ``_id`` suffix
            target_column: Column on target (usually "id")
            nullable: Whether FK can be NULL
        """
        super().__init__(int, nullable=nullable, default=RelationKind.REFERENCED_IN.foreign_key_default)

        self._target = target
        self.target_column = target_column
        self.back_populates = back_populates
        self.inverse_of = inverse_of
        self.owner_class = None
        self.target_class = None
        self.single_relationship = None

    def __set_name__(self, owner, name):
        super().__set_name__(owner, name)
        self.owner_class = owner

    @property
    def target_name(self):
        if isinstance(self._target, str):
            return self._target
        return getattr(self._target, "__name__", repr(self._target))

    @property
    def foreign_key(self):
        """``(table_name, column)`` of the referenced owner, once resolved."""
        if self.target_class is None:
            return None
        return (self.target_class._table_name, self.target_column)

    def _lookup(self, registry):
        if isinstance(self._target, str):
            return registry.get(self._target)
        if isinstance(self._target, type):
            return self._target
        if callable(self._target):
            try:
                return self._target()
            except NameError:
                return None
        raise InvalidRelation(f"Invalid foreign key target {self._target!r} on {self.name}")

    def resolve(self, registry):
        """Create the relation descriptors on both classes.

        Returns False while the target class is not defined yet.
        """
        if self.target_class is not None:
            return True
        cls = self._lookup(registry)
        if cls is None:
            return False
        self.target_class = cls

        from .relationship import Relationship
        from .single_relationship import SingleRelationship

        inverse = self.inverse_of or inverse_name(self.name, RelationKind.REFERENCED_IN.foreign_key_suffix)

        # many-to-one side: child -> owner
        single = SingleRelationship(self)
        single.metadata = RelationMetadata(
            name=inverse,
            kind=RelationKind.REFERENCED_IN,
            owner_class=self.owner_class,
            klass=cls,
            foreign_key=self.name,
            inverse_name=self.back_populates,
            foreign_key_field=self,
            inverse_field=single,
        )
        single.name = inverse
        setattr(self.owner_class, inverse, single)
        self.owner_class._relations[inverse] = single.metadata
        self.single_relationship = single

        # one-to-many side: owner -> children
        if self.back_populates:
            metadata = RelationMetadata(
                name=self.back_populates,
                kind=RelationKind.REFERENCES_MANY,
                owner_class=cls,
                klass=self.owner_class,
                foreign_key=self.name,
                inverse_name=inverse,
                foreign_key_field=self,
                inverse_field=single,
            )
            setattr(cls, self.back_populates, Relationship(metadata))
            cls._relations[self.back_populates] = metadata
        return True
