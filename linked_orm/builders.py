"""
Builders turn raw input (attribute dicts, documents, queries) into relation
targets, and apply nested attribute assignments to existing relations.
"""

import logging

from .errors import DocumentNotFound, TooManyNestedAttributeRecords
from .query import Query

logger = logging.getLogger(__name__)

TRUE_VALUES = (True, 1, "1", "true", "True", "yes")


def _truthy(value):
    return value in TRUE_VALUES


class ManyBuilder:
    """Builds the children of a one-to-many relation.

    A dict builds one child, a list builds every dict in it (documents pass
    through untouched), a ``Query`` stays lazy, and None gives an empty list.
    Foreign keys are left alone; binding is the relation's job.
    """

    def __init__(self, metadata, obj):
        self.metadata = metadata
        self.object = obj

    def build(self):
        if self.object is None:
            return []
        if isinstance(self.object, Query):
            return self.object
        if isinstance(self.object, dict):
            return self._build_one(self.object)
        return [self._build_one(item) for item in self.object]

    def _build_one(self, item):
        if isinstance(item, dict):
            return self.metadata.klass(**item)
        return item


class SingleBuilder:
    """Builds the owner referenced from a child: a dict builds a new owner."""

    def __init__(self, metadata, obj):
        self.metadata = metadata
        self.object = obj

    def build(self):
        if isinstance(self.object, dict):
            return self.metadata.klass(**self.object)
        return self.object


class NestedManyBuilder:
    """Applies nested attributes to a one-to-many relation.

    ``attributes`` is a list of attribute dicts, or a dict of them keyed by
    position (``{"0": {...}, "1": {...}}``) as submitted by forms. A dict
    without ``id`` builds a new child, one with ``id`` updates that child, and
    ``_destroy`` removes it when ``allow_destroy`` is set.

    Options:
        allow_destroy: Honour ``_destroy`` flags.
        limit: Maximum number of attribute dicts accepted.
        reject_if: Callable; dicts for which it returns True are skipped.
    """

    def __init__(self, metadata, attributes, options=None):
        self.metadata = metadata
        self.attributes = attributes
        self.options = options or {}

    def _items(self):
        if isinstance(self.attributes, dict):
            return list(self.attributes.values())
        return list(self.attributes or [])

    def _reject(self, attributes):
        reject_if = self.options.get("reject_if")
        return bool(reject_if and reject_if(attributes))

    async def build(self, parent):
        relation = getattr(parent, self.metadata.name)
        items = self._items()
        limit = self.options.get("limit")
        if limit is not None and len(items) > limit:
            raise TooManyNestedAttributeRecords(self.metadata.name, limit)

        await relation.loaded()
        for item in items:
            if self._reject(item):
                continue
            attributes = dict(item)
            destroy = _truthy(attributes.pop("_destroy", False))
            document_id = attributes.pop("id", None)

            if document_id is None:
                if not destroy:
                    await relation.build(attributes)
                continue

            existing = next(
                (doc for doc in relation if str(doc.id) == str(document_id)), None
            )
            if existing is None:
                raise DocumentNotFound(self.metadata.klass, document_id)

            if destroy and self.options.get("allow_destroy"):
                await relation.delete(existing)
                await existing.destroy()
                logger.debug("Nested destroy of %r on %r", existing, relation)
            else:
                existing.assign_attributes(attributes)
        return relation


class NestedOneBuilder:
    """Applies nested attributes to a child's owner reference.

    Options are the same as ``NestedManyBuilder`` except ``limit``. The child
    only holds a weak reference to a newly built owner, so callers keep the
    returned owner (and save it) themselves.
    """

    def __init__(self, metadata, attributes, options=None):
        self.metadata = metadata
        self.attributes = attributes
        self.options = options or {}

    def build(self, child):
        accessor = self.metadata.inverse_field
        existing = accessor.__get__(child, type(child))
        attributes = dict(self.attributes or {})

        reject_if = self.options.get("reject_if")
        if reject_if and reject_if(attributes):
            return existing

        destroy = _truthy(attributes.pop("_destroy", False))
        document_id = attributes.pop("id", None)

        if destroy and self.options.get("allow_destroy"):
            accessor.__set__(child, None)
            return None

        if existing is not None and (document_id is None or str(existing.id) == str(document_id)):
            existing.assign_attributes(attributes)
            return existing

        if document_id is not None:
            raise DocumentNotFound(self.metadata.klass, document_id)

        owner = SingleBuilder(self.metadata, attributes).build()
        accessor.__set__(child, owner)
        return owner
