from .errors import InvalidRelation
from .field import Field
from .naming import default_table_name

class EntityMeta(type):
    registry = {}
    # Foreign keys whose target class has not been defined yet
    pending = []

    def __new__(meta, name, bases, attrs):
        fields = {}
        for base in reversed(bases):
            fields.update(getattr(base, "_fields", {}))

        for key, val in list(attrs.items()):
            if isinstance(val, Field):
                val.name = key
                fields[key] = val

        attrs["_fields"] = fields
        attrs["_relations"] = {}

        cls = super().__new__(meta, name, bases, attrs)

        if name != "Entity":
            EntityMeta.registry[name] = cls
            cls._table_name = attrs.get("_table_name") or default_table_name(name)

            from .foreign_key import ForeignKey
            for key, val in attrs.items():
                if isinstance(val, ForeignKey):
                    EntityMeta.pending.append(val)

            EntityMeta.resolve_pending()

        return cls

    @classmethod
    def resolve_pending(meta, strict=False):
        """Wire up every foreign key whose target class is now known.

        With ``strict`` an unresolvable target raises ``InvalidRelation``.
        """
        for foreign_key in list(meta.pending):
            if foreign_key.resolve(meta.registry):
                meta.pending.remove(foreign_key)

        if strict and meta.pending:
            missing = ', '.join(
                f"{fk.owner_class.__name__}.{fk.name} -> {fk.target_name}"
                for fk in meta.pending
            )
            available = ', '.join(meta.registry.keys())
            raise InvalidRelation(f"Unknown foreign key target(s): {missing}. Available: {available}")
