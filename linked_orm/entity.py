import logging

from .entity_meta import EntityMeta
from .errors import DocumentNotFound, LinkedOrmError, UnknownAttributeError, ValidationError
from .field import Field
from .foreign_key import ForeignKey
from .naming import get_column_name
from .query import FIND_KEYWORDS, Query
from .single_relationship import SingleRelationship

logger = logging.getLogger(__name__)


class Entity(metaclass=EntityMeta):
    id = Field(int, primary_key=True, nullable=True)
    _context = None

    def __init__(self, **kwargs):
        self._new_record = True
        self._destroyed = False
        self.errors = {}
        for f in self._fields.values():
            setattr(self, f.name, f.default)
        self.assign_attributes(kwargs)

    def __repr__(self):
        return f"<{self.__class__.__name__}(id={self.id if self.id is not None else 'New'})>"

    @classmethod
    def context(cls):
        if cls._context is None:
            raise LinkedOrmError(f"{cls.__name__} is not attached to a db_context")
        return cls._context

    @classmethod
    def relations(cls):
        """Metadata of every relation declared on this class, keyed by name."""
        return dict(cls._relations)

    @property
    def new_record(self):
        return self._new_record

    @property
    def destroyed(self):
        return self._destroyed

    @property
    def persisted(self):
        """True once the document is stored and until it is deleted."""
        return not self._new_record and not self._destroyed

    def assign_attributes(self, attributes):
        """Set fields (and inverse accessors) from a dict of attributes.

        Raises:
            UnknownAttributeError: if a key is neither a field nor an accessor.
        """
        attributes = dict(attributes or {})
        cls = type(self)
        unknown = [
            key for key in attributes
            if key not in self._fields and not isinstance(getattr(cls, key, None), SingleRelationship)
        ]
        if unknown:
            raise UnknownAttributeError(cls, unknown)
        for key, value in attributes.items():
            setattr(self, key, value)

    def matches(self, selector):
        """Whether every ``{field: value}`` pair of ``selector`` holds for this document."""
        return all(getattr(self, key, None) == value for key, value in (selector or {}).items())

    def validate(self):
        """Hook for subclasses; add messages with ``self.add_error``."""

    def add_error(self, name, message):
        self.errors.setdefault(name, []).append(message)

    def is_valid(self):
        self.errors = {}
        for f in self._fields.values():
            for message in f.errors_for(getattr(self, f.name)):
                self.add_error(f.name, message)
        self.validate()
        return not self.errors

    @classmethod
    def query(cls):
        """Create a new query for this entity.

        Example:
            posts = await Post.query().filter(Post.title == "Testing").all()
        """
        return Query(cls)

    @classmethod
    async def get_by_id(cls, id):
        """Get entity by primary key or None."""
        return await cls.query().filter_by(id=id).first()

    @classmethod
    async def get_all(cls):
        return await cls.query().all()

    @classmethod
    async def find(cls, arg, conditions=None):
        """Find by id, list of ids, or one of the keywords ``all``, ``first``, ``last``.

        Example:
            await Post.find(3)
            await Post.find("all", conditions={"title": "Sir"})

        Raises:
            DocumentNotFound: if an id does not match and the context is
                configured with ``raise_not_found``.
        """
        query = cls.query().where(conditions)
        if isinstance(arg, str) and arg in FIND_KEYWORDS:
            return await getattr(query, arg)()

        if isinstance(arg, (list, tuple, set)):
            ids = list(arg)
            documents = await query.filter(cls.id.in_(ids)).all()
            missing = set(ids) - {doc.id for doc in documents}
            if missing and cls.context().raise_not_found:
                raise DocumentNotFound(cls, sorted(missing))
            return documents

        document = await query.filter_by(id=arg).first()
        if document is None and cls.context().raise_not_found:
            raise DocumentNotFound(cls, arg)
        return document

    @classmethod
    async def delete_all(cls, conditions=None):
        """Delete matching rows without loading them. Returns the row count."""
        count = await cls.query().where(conditions).delete()
        logger.debug("delete_all %s %s removed %d", cls.__name__, conditions or {}, count)
        return count

    @classmethod
    async def destroy_all(cls, conditions=None):
        """Load matching documents and destroy each, running destroy hooks."""
        documents = await cls.query().where(conditions).all()
        for document in documents:
            await document.destroy()
        logger.debug("destroy_all %s %s removed %d", cls.__name__, conditions or {}, len(documents))
        return len(documents)

    @classmethod
    def _from_row(cls, row, description):
        """Convert database row to entity instance."""
        obj = cls()
        for idx, col in enumerate(description):
            col_name = col[0]
            if col_name in cls._fields:
                field = cls._fields[col_name]
                setattr(obj, col_name, field.sql_to_python(row[idx]))
        obj._new_record = False
        return obj

    @classmethod
    async def sync_schema(cls):
        """Create the table for this entity if it doesn't exist."""
        fields_sql = []
        fks_sql = []

        for f in cls._fields.values():
            name = get_column_name(f.name)
            col = f"{name} {f.sql_type()}"
            if f.primary_key:
                col += " PRIMARY KEY AUTOINCREMENT"
            if not f.nullable:
                col += " NOT NULL"
            if isinstance(f.default, bool):
                col += f" DEFAULT {1 if f.default else 0}"
            fields_sql.append(col)

            if isinstance(f, ForeignKey) and f.foreign_key:
                table, colname = f.foreign_key
                fks_sql.append(f"FOREIGN KEY ({name}) REFERENCES {table}({colname})")

        sql = f"""
        CREATE TABLE IF NOT EXISTS {cls._table_name} (
            {', '.join(fields_sql + fks_sql)}
        )
        """
        await cls.context().execute(sql)

    def _column_values(self):
        columns = []
        values = []
        for f in self._fields.values():
            if f.primary_key:
                continue
            columns.append(get_column_name(f.name))
            values.append(f.python_to_sql(getattr(self, f.name)))
        return columns, values

    async def insert(self):
        """Insert this entity into the database."""
        columns, values = self._column_values()
        placeholders = ", ".join("?" for _ in columns)
        sql = f"INSERT INTO {self._table_name} ({', '.join(columns)}) VALUES ({placeholders})"
        self.id = await self.context().insert(sql, values)
        self._new_record = False
        self._rebind_children()

    def _rebind_children(self):
        # Children built before the owner had an id carry a null foreign key
        for name, metadata in self._relations.items():
            if metadata.stores_foreign_key:
                continue
            relation = getattr(type(self), name).cached(self)
            if relation is not None and relation.is_loaded:
                relation.binding().bind()

    async def update(self):
        """Update this entity in the database."""
        if self.id is None:
            raise ValueError("Cannot update entity without an id. Use insert() for new entities.")

        columns, values = self._column_values()
        assignments = ", ".join(f"{column} = ?" for column in columns)
        sql = f"UPDATE {self._table_name} SET {assignments} WHERE id = ?"
        await self.context().execute(sql, values + [self.id])

    async def save(self):
        """Validate, then insert or update. Returns False if validation fails."""
        if not self.is_valid():
            logger.debug("%r failed validation: %s", self, self.errors)
            return False
        if self._new_record:
            await self.insert()
        else:
            await self.update()
        return True

    async def save_or_raise(self):
        """Like ``save`` but raises ``ValidationError`` instead of returning False."""
        if not await self.save():
            raise ValidationError(self)
        return True

    async def delete(self):
        """Remove this entity from the database without running hooks."""
        if not self._new_record and not self._destroyed:
            sql = f"DELETE FROM {self._table_name} WHERE id = ?"
            await self.context().execute(sql, (self.id,))
        self._destroyed = True

    async def destroy(self):
        """Run ``before_destroy``, delete, then run ``after_destroy``."""
        await self.before_destroy()
        await self.delete()
        await self.after_destroy()

    async def before_destroy(self):
        pass

    async def after_destroy(self):
        pass
