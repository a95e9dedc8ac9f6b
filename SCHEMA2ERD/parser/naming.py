"""Rails naming conventions used for foreign-key targets."""

from typing import Optional

import inflection


def pluralize(word: str) -> str:
    """ActiveSupport-compatible pluralisation (`user` -> `users`, `person` -> `people`)."""
    return inflection.pluralize(word)


def referenced_table_for(column: str) -> Optional[str]:
    """Table a `<prefix>_id` column conventionally points at, or None."""
    if len(column) <= 3 or not column.endswith("_id"):
        return None
    return pluralize(column[:-3])


def foreign_key_column(to_table: str) -> str:
    """Column Rails assumes for `add_foreign_key` without `column:` (`users` -> `user_id`)."""
    return inflection.singularize(to_table) + "_id"
