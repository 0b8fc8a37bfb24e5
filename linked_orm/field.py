import datetime
from decimal import Decimal

class Field:
    def __init__(self, py_type, primary_key=False, nullable=True, default=None):
        self.py_type = py_type
        self.primary_key = primary_key
        self.nullable = nullable
        self.default = default
        self.name = None
        self.entity_cls = None

    def __set_name__(self, owner, name):
        self.name = name
        self.entity_cls = owner

    def __get__(self, obj, owner):
        """Column for class access (``Post.title``), value for instance access."""
        if obj is None:
            from .query import Column
            return Column(self.name)
        return obj.__dict__.get(self.name, self.default)

    def __set__(self, obj, value):
        obj.__dict__[self.name] = value

    def errors_for(self, value):
        """Return the validation messages for a candidate value."""
        if value is None and not self.nullable and not self.primary_key:
            return ["can't be blank"]
        return []

    def sql_type(self):
        """Map Python type -> SQLite type."""
        type_map = {
            int: "INTEGER",
            float: "REAL",
            str: "TEXT",
            bool: "INTEGER",
            datetime.datetime: "TEXT",
            Decimal: "REAL"
        }
        return type_map.get(self.py_type, "TEXT")

    def python_to_sql(self, value):
        if value is None:
            return None
        if isinstance(value, datetime.datetime):
            return value.isoformat()
        if isinstance(value, Decimal):
            return float(value)
        if isinstance(value, bool):
            return int(value)
        return value

    def sql_to_python(self, value):
        if value is None:
            return None
        if self.py_type == datetime.datetime and isinstance(value, str):
            return datetime.datetime.fromisoformat(value)
        if self.py_type == bool and isinstance(value, int):
            return bool(value)
        if self.py_type == Decimal and isinstance(value, (int, float)):
            return Decimal(str(value))
        return value
