class LinkedOrmError(Exception):
    """Base class for every error raised by linked_orm."""


class InvalidRelation(LinkedOrmError):
    """A relation declaration could not be resolved."""


class UnknownAttributeError(LinkedOrmError):
    def __init__(self, klass, names):
        self.klass = klass
        self.names = sorted(names)
        available = ', '.join(klass._fields.keys())
        super().__init__(
            f"Unknown attribute(s) {', '.join(self.names)} for {klass.__name__}. "
            f"Available: {available}"
        )


class ValidationError(LinkedOrmError):
    """Raised by the strict save paths when a document fails validation."""

    def __init__(self, document):
        self.document = document
        self.errors = dict(document.errors)
        details = '; '.join(
            f"{name} {', '.join(messages)}" for name, messages in self.errors.items()
        )
        super().__init__(f"Validation of {type(document).__name__} failed: {details}")


class DocumentNotFound(LinkedOrmError):
    def __init__(self, klass, identifier):
        self.klass = klass
        self.identifier = identifier
        super().__init__(f"Document not found for class {klass.__name__} with id(s) {identifier}")


class TooManyNestedAttributeRecords(LinkedOrmError):
    def __init__(self, name, limit):
        self.name = name
        self.limit = limit
        super().__init__(f"Accepting nested attributes for {name} is limited to {limit} records")


class RelationNotLoaded(LinkedOrmError):
    def __init__(self, name):
        self.name = name
        super().__init__(f"Relation '{name}' is not loaded yet; await load() first")
