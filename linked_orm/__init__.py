# linked_orm/__init__.py

from .entity import Entity
from .field import Field
from .foreign_key import ForeignKey
from .db_context import db_context
from .query import Query, Column, Condition
from .table import table
from .naming import get_column_name
from .metadata import RelationMetadata
from .macros import RelationKind
from .binding import ManyBinding
from .building import building, is_building
from .referenced_many import ReferencedMany
from .builders import ManyBuilder, SingleBuilder, NestedManyBuilder, NestedOneBuilder
from .errors import (
    LinkedOrmError,
    InvalidRelation,
    UnknownAttributeError,
    ValidationError,
    DocumentNotFound,
    TooManyNestedAttributeRecords,
    RelationNotLoaded,
)

__all__ = [
    'Entity',
    'Field',
    'ForeignKey',
    'db_context',
    'Query',
    'Column',
    'Condition',
    'table',
    'get_column_name',
    'RelationMetadata',
    'RelationKind',
    'ManyBinding',
    'building',
    'is_building',
    'ReferencedMany',
    'ManyBuilder',
    'SingleBuilder',
    'NestedManyBuilder',
    'NestedOneBuilder',
    'LinkedOrmError',
    'InvalidRelation',
    'UnknownAttributeError',
    'ValidationError',
    'DocumentNotFound',
    'TooManyNestedAttributeRecords',
    'RelationNotLoaded',
]
