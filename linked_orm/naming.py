import inflection

KEY_WORDS = ["order", "group", "index"]


def get_column_name(name: str) -> str:
    """Return the column name, escaping it if it's a SQL keyword."""
    if name.lower() in KEY_WORDS:
        return f"[{name}]"
    return name


def default_table_name(class_name: str) -> str:
    """``BlogPost`` -> ``blog_posts``."""
    return inflection.tableize(class_name)


def inverse_name(field_name: str, suffix: str) -> str:
    """Name of the accessor paired with a foreign key field.

    ``author_id`` -> ``author``. Names without the suffix get ``_ref``
    appended so the accessor never shadows the field itself.
    """
    if field_name.endswith(suffix) and len(field_name) > len(suffix):
        return field_name[:-len(suffix)]
    return f"{field_name}_ref"
