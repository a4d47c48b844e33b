"""
Migration exceptions
"""


class MigrationError(Exception):
    """Base class for migration failures"""


class RowSkipped(MigrationError):
    """A single source row cannot be migrated; the run continues without it"""

    def __init__(self, table: str, key, reason: str):
        self.table = table
        self.key = key
        self.reason = reason
        super().__init__(f"{table} [{key}]: {reason}")


class SchemaBootstrapError(MigrationError):
    """The DDL script failed for a reason other than objects already existing"""
