import weakref

class SingleRelationship:
    """Many-to-one accessor from a child to its owner.

    The in-memory pointer is a weak reference, so a child never keeps its
    owner alive; the foreign key column remains the durable link.
    """

    def __init__(self, foreign_key_field):
        self.foreign_key_field = foreign_key_field
        self.metadata = None
        self.name = None

    @property
    def _ref_key(self):
        return f"_{self.name}_ref"

    def __get__(self, obj, owner):
        if obj is None:
            return self

        ref = obj.__dict__.get(self._ref_key)
        target = ref() if ref is not None else None
        if target is None:
            return None

        fk_value = self.foreign_key_field.__get__(obj, owner)
        # A foreign key pointing somewhere else makes the pointer stale
        if fk_value is not None and target.id is not None and fk_value != target.id:
            return None
        return target

    def __set__(self, obj, value):
        """Point the child at ``value`` and copy its id into the foreign key."""
        self.link(obj, value)
        self.foreign_key_field.__set__(obj, value.id if value is not None else None)

    def link(self, obj, value):
        """Set only the in-memory pointer."""
        obj.__dict__[self._ref_key] = weakref.ref(value) if value is not None else None

    async def load(self, obj):
        """Return the owner, fetching it by foreign key when it's not in memory."""
        current = self.__get__(obj, type(obj))
        if current is not None:
            return current

        fk_value = self.foreign_key_field.__get__(obj, type(obj))
        if fk_value is None:
            return None

        target = await self.metadata.klass.query().filter_by(id=fk_value).first()
        if target is not None:
            self.link(obj, target)
        return target
