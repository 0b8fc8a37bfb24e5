class table:
    """Class decorator overriding the default (tableized) table name.

    Example:
        @table("blog_entries")
        class Post(Entity):
            ...
    """
    def __init__(self, name=''):
        self.name = name

    def __call__(self, cls):
        if self.name:
            cls._table_name = self.name
        return cls
