"""Column type vocabulary shared by both parser tiers."""

from typing import Dict, FrozenSet

# t.<method> -> rendered column type
METHOD_TYPES: Dict[str, str] = {
    "string": "varchar",
    "text": "text",
    "integer": "int",
    "bigint": "int",
    "float": "float",
    "decimal": "decimal",
    "boolean": "boolean",
    "date": "date",
    "datetime": "datetime",
    "timestamp": "timestamp",
    "time": "time",
    "json": "json",
    "jsonb": "jsonb",
    "uuid": "uuid",
    "binary": "binary",
}

REFERENCE_METHODS: FrozenSet[str] = frozenset({"references", "belongs_to"})

# t.<method> calls inside a table block that never describe a column
NON_COLUMN_METHODS: FrozenSet[str] = frozenset({
    "index",
    "check_constraint",
    "exclusion_constraint",
    "unique_constraint",
    "foreign_key",
    "remove",
    "remove_index",
    "rename",
})

REFERENCE_ID_TYPE = "int"
POLYMORPHIC_TYPE_COLUMN_TYPE = "varchar"
TIMESTAMP_COLUMNS = (("created_at", "datetime"), ("updated_at", "datetime"))


def column_type_for(method: str) -> str:
    """Map a builder method (or declared type token) to its column type.

    Unmapped names pass through unchanged.
    """
    return METHOD_TYPES.get(method, method)
