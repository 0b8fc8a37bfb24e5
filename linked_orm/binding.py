class ManyBinding:
    """Keeps foreign keys and inverse pointers of children in sync with an owner.

    Purely in memory; whether the result gets saved is decided by the relation.
    """

    def __init__(self, base, target, metadata):
        self.base = base
        self.target = target
        self.metadata = metadata

    def bind(self):
        for document in self.target:
            self.bind_one(document)

    def bind_one(self, document):
        self.metadata.set_foreign_key(document, self.base.id)
        self.metadata.set_inverse(document, self.base)

    def unbind(self):
        for document in self.target:
            self.unbind_one(document)

    def unbind_one(self, document):
        self.metadata.set_foreign_key(document, None)
        self.metadata.set_inverse(document, None)
