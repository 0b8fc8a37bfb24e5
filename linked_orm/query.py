import operator

from .naming import get_column_name

FIND_KEYWORDS = ("all", "first", "last")


class Condition:
    """A SQL condition with parameters, plus its in-memory equivalent."""
    def __init__(self, sql, params, predicate=None):
        self.sql = sql
        self.params = params
        self.predicate = predicate

    def matches(self, entity):
        if self.predicate is None:
            raise TypeError(f"Condition '{self.sql}' cannot be evaluated in memory")
        return self.predicate(entity)


class Column:
    """Represents a database column for query building."""
    def __init__(self, name):
        self.name = name

    def _compare(self, sql_op, py_op, other):
        name = self.name
        return Condition(
            f"{get_column_name(name)} {sql_op} ?", [other],
            lambda e: _safe_compare(py_op, getattr(e, name), other),
        )

    def __eq__(self, other):
        if other is None:
            return self.is_null()
        return self._compare("=", operator.eq, other)

    def __ne__(self, other):
        if other is None:
            return self.is_not_null()
        return self._compare("!=", operator.ne, other)

    def __lt__(self, other):
        return self._compare("<", operator.lt, other)

    def __le__(self, other):
        return self._compare("<=", operator.le, other)

    def __gt__(self, other):
        return self._compare(">", operator.gt, other)

    def __ge__(self, other):
        return self._compare(">=", operator.ge, other)

    __hash__ = None

    def in_(self, values):
        """SQL IN operator."""
        values = list(values)
        name = self.name
        if not values:
            return Condition("1 = 0", [], lambda e: False)
        placeholders = ", ".join("?" * len(values))
        return Condition(
            f"{get_column_name(name)} IN ({placeholders})", values,
            lambda e: getattr(e, name) in values,
        )

    def is_null(self):
        name = self.name
        return Condition(f"{get_column_name(name)} IS NULL", [],
                         lambda e: getattr(e, name) is None)

    def is_not_null(self):
        name = self.name
        return Condition(f"{get_column_name(name)} IS NOT NULL", [],
                         lambda e: getattr(e, name) is not None)

    def desc(self):
        return f"{get_column_name(self.name)} DESC"

    def asc(self):
        return f"{get_column_name(self.name)} ASC"

    def __str__(self):
        return get_column_name(self.name)


def _safe_compare(op, left, right):
    # SQL comparisons against NULL never match
    if left is None:
        return False
    return op(left, right)


def conditions_from(selector):
    """Turn a ``{field: value}`` selector into equality conditions."""
    return [Column(name) == value for name, value in (selector or {}).items()]


class Query:
    """Lazy, restartable query over one entity class.

    Nothing touches the database until ``all``, ``first``, ``last``, ``count``
    or ``delete`` is awaited, and every await re-runs the SQL.
    """
    def __init__(self, entity_cls):
        self.entity_cls = entity_cls
        self._conditions = []
        self._order_by = None
        self._limit_val = None

    def filter(self, *conditions):
        """Add filter conditions using comparison operators.

        Example:
            await Post.query().filter(Post.title == "Testing").all()
        """
        for condition in conditions:
            if not isinstance(condition, Condition):
                raise TypeError(f"Expected Condition, got {type(condition)}")
            self._conditions.append(condition)
        return self

    def filter_by(self, **kwargs):
        """Simple equality filters using keyword arguments."""
        return self.filter(*conditions_from(kwargs))

    def where(self, selector):
        """Equality filters from a selector dict, e.g. ``{"title": "X"}``."""
        return self.filter(*conditions_from(selector))

    def order_by(self, *fields):
        self._order_by = ", ".join(str(f) for f in fields)
        return self

    def limit(self, n):
        self._limit_val = n
        return self

    def copy(self):
        clone = Query(self.entity_cls)
        clone._conditions = list(self._conditions)
        clone._order_by = self._order_by
        clone._limit_val = self._limit_val
        return clone

    def matches(self, entity):
        """Whether ``entity`` satisfies every filter of this query."""
        return isinstance(entity, self.entity_cls) and all(
            condition.matches(entity) for condition in self._conditions
        )

    def _where_clause(self):
        if not self._conditions:
            return "", []
        params = []
        for condition in self._conditions:
            params.extend(condition.params)
        return f" WHERE {' AND '.join(c.sql for c in self._conditions)}", params

    @property
    def _context(self):
        return self.entity_cls.context()

    async def all(self):
        """Execute query and return all results."""
        where, params = self._where_clause()
        sql = f"SELECT * FROM {self.entity_cls._table_name}{where}"
        if self._order_by:
            sql += f" ORDER BY {self._order_by}"
        if self._limit_val is not None:
            sql += f" LIMIT {self._limit_val}"

        rows, description = await self._context.fetch(sql, params)
        return [self.entity_cls._from_row(row, description) for row in rows]

    async def first(self):
        """Get first result by id or None."""
        query = self.copy()
        if query._order_by is None:
            query.order_by("id ASC")
        results = await query.limit(1).all()
        return results[0] if results else None

    async def last(self):
        """Get last result by id or None."""
        results = await self.copy().order_by("id DESC").limit(1).all()
        return results[0] if results else None

    async def count(self):
        where, params = self._where_clause()
        sql = f"SELECT COUNT(*) FROM {self.entity_cls._table_name}{where}"
        rows, _ = await self._context.fetch(sql, params)
        return rows[0][0]

    async def delete(self):
        """Delete every matching row and return how many were removed."""
        where, params = self._where_clause()
        sql = f"DELETE FROM {self.entity_cls._table_name}{where}"
        return await self._context.execute(sql, params)

    def __repr__(self):
        where, params = self._where_clause()
        return f"<Query {self.entity_cls.__name__}{where} params={params}>"
