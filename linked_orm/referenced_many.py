import logging

from .binding import ManyBinding
from .building import is_building
from .errors import RelationNotLoaded
from .macros import RelationKind
from .query import FIND_KEYWORDS, Query

logger = logging.getLogger(__name__)


def _same_document(left, right):
    if left is right:
        return True
    return type(left) is type(right) and left.id is not None and left.id == right.id


class ReferencedMany:
    """The children of one owner, linked by a foreign key on each child.

    The target is either a materialized list of children or a lazy ``Query``
    that gets evaluated the first time an operation needs the documents.

    Example:
        author = await Author.get_by_id(1)
        post = await author.posts.create({"title": "Testing"})
        await author.posts.delete_all({"title": "Draft"})
    """

    kind = RelationKind.REFERENCES_MANY

    def __init__(self, base, target, metadata):
        """
        Args:
            base: The document this relation hangs off of.
            target: The children, or a query that finds them.
            metadata: The relation's metadata.
        """
        self.base = base
        self.metadata = metadata
        self.target = target

    def __repr__(self):
        state = "loaded" if self.is_loaded else "lazy"
        return f"<ReferencedMany {self.metadata.owner_class.__name__}.{self.metadata.name} ({state})>"

    @property
    def is_loaded(self):
        return not isinstance(self.target, Query)

    def _entries(self):
        if not self.is_loaded:
            raise RelationNotLoaded(self.metadata.name)
        return self.target

    def __len__(self):
        return len(self._entries())

    def __iter__(self):
        return iter(self._entries())

    def __getitem__(self, index):
        return self._entries()[index]

    def __contains__(self, document):
        return any(_same_document(existing, document) for existing in self._entries())

    def _persists(self, building=False):
        """Whether changes made by the current operation reach the store."""
        return self.base.persisted and not building

    def binding(self, new_target=None):
        return ManyBinding(self.base, self.target if new_target is None else new_target, self.metadata)

    async def loaded(self):
        """Evaluate a lazy target into a list, at most once."""
        if isinstance(self.target, Query):
            logger.debug("Loading %r", self)
            self.target = await self.target.all()
        return self

    async def load(self):
        await self.loaded()
        return self.target

    async def _save(self, document, strict=False):
        if strict:
            return await document.save_or_raise()
        saved = await document.save()
        if not saved:
            logger.warning("%r was not saved for %r: %s", document, self, document.errors)
        return saved

    async def bind(self, building=None):
        """Point every child at the owner.

        Children are saved when the owner is persisted, unless a build is in
        progress (``building`` argument or an active ``building()`` block).
        """
        await self.loaded()
        self.binding().bind()
        if self._persists(building or is_building()):
            for document in self.target:
                await self._save(document)

    async def unbind(self):
        """Clear every child's link to the owner.

        Children are deleted from the store when the owner is persisted.

        Returns:
            The new, empty target.
        """
        await self.loaded()
        self.binding().unbind()
        if self._persists():
            for document in self.target:
                await document.delete()
            logger.debug("Deleted %d document(s) unbinding %r", len(self.target), self)
        return []

    async def clear(self):
        """Unbind every child and return the now empty relation."""
        self.target = await self.unbind()
        return self

    async def substitute(self, new_target, building=None):
        """Replace every child of the relation.

        ``None`` unbinds (and deletes, for a persisted owner) the current
        children. Anything else becomes the new target and is bound; previous
        children left out of it are released.

        Returns:
            The relation.
        """
        if new_target is None:
            self.target = await self.unbind()
            return self

        documents = self.metadata.builder(new_target).build()
        if isinstance(documents, Query):
            documents = await documents.all()
        elif not isinstance(documents, list):
            documents = [documents]
        await self._release(documents, building)
        self.target = documents
        await self.bind(building)
        return self

    async def _release(self, kept, building=None):
        await self.loaded()
        stale = [
            document for document in self.target
            if not any(_same_document(document, other) for other in kept)
        ]
        if not stale:
            return
        self.binding(stale).unbind()
        if self._persists(building or is_building()):
            for document in stale:
                if document.persisted:
                    await self._save(document)

    async def build(self, attributes=None):
        """Build a child and append it without saving."""
        document = self.metadata.builder(attributes or {}).build()
        await self._append(document)
        return document

    async def create(self, attributes=None):
        """Build a child, append it, and save it if the owner is persisted.

        Returns:
            The new child; check its ``errors`` when validation failed.
        """
        document = await self.build(attributes)
        if self._persists():
            await self._save(document)
        return document

    async def create_or_raise(self, attributes=None):
        """Like ``create`` but raises ``ValidationError`` if the save fails validation."""
        document = await self.build(attributes)
        if self._persists():
            await self._save(document, strict=True)
        return document

    async def push(self, *documents):
        """Append existing documents, saving them if the owner is persisted.

        Documents that are already children are skipped.
        """
        await self.loaded()
        for document in documents:
            if document in self:
                continue
            await self._append(document)
            if self._persists():
                await self._save(document)
        return self

    async def delete(self, document):
        """Remove one child from the relation and clear its foreign key.

        The child itself stays in the store, orphaned, when the owner is
        persisted. Returns the document, or None if it wasn't a child.
        """
        await self.loaded()
        for index, existing in enumerate(self.target):
            if _same_document(existing, document):
                removed = self.target.pop(index)
                break
        else:
            return None

        self.binding().unbind_one(removed)
        if self._persists() and removed.persisted:
            await self._save(removed)
        return removed

    async def find(self, arg, conditions=None):
        """Find children by id, or by ``all``/``first``/``last`` plus conditions.

        Example:
            await person.posts.find(4)
            await person.posts.find("all", conditions={"title": "Sir"})
        """
        klass = self.metadata.klass
        if not (isinstance(arg, str) and arg in FIND_KEYWORDS):
            return await klass.find(arg)
        if self.base.id is None:
            return [] if arg == "all" else None
        return await klass.find(arg, conditions=self._scoped(conditions))

    async def delete_all(self, conditions=None):
        """Delete the owner's children matching ``conditions`` without callbacks.

        Returns:
            The number of documents deleted from the store.
        """
        selector = self._scoped(conditions)
        self._remove_matching(selector)
        # Nothing in the store points at an unsaved owner; "fk IS NULL" would match orphans
        if self.base.id is None:
            return 0
        return await self.metadata.klass.delete_all(selector)

    async def destroy_all(self, conditions=None):
        """Destroy the owner's children matching ``conditions``, running destroy hooks.

        Returns:
            The number of documents destroyed in the store.
        """
        selector = self._scoped(conditions)
        self._remove_matching(selector)
        if self.base.id is None:
            return 0
        return await self.metadata.klass.destroy_all(selector)

    def _scoped(self, conditions):
        selector = dict(conditions or {})
        selector[self.metadata.foreign_key] = self.base.id
        return selector

    def _remove_matching(self, selector):
        # A lazy target holds nothing in memory yet
        if self.is_loaded:
            self.target[:] = [doc for doc in self.target if not doc.matches(selector)]

    async def _append(self, document):
        await self.loaded()
        self.target.append(document)
        self.binding().bind_one(document)

    @classmethod
    def builder(cls, metadata, obj):
        return cls.kind.builder(metadata, obj)

    @classmethod
    def nested_builder(cls, metadata, attributes, options=None):
        return cls.kind.nested_builder(metadata, attributes, options)

    @classmethod
    def embedded(cls):
        return cls.kind.embedded

    @classmethod
    def foreign_key_default(cls):
        return cls.kind.foreign_key_default

    @classmethod
    def foreign_key_suffix(cls):
        return cls.kind.foreign_key_suffix

    @classmethod
    def macro(cls):
        return cls.kind.macro

    @classmethod
    def stores_foreign_key(cls):
        return cls.kind.stores_foreign_key
