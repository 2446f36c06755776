"""
errors.py - Error taxonomy for the BI editor

InvalidIdentifier  - table/column name outside the allowed charset
ChangeValidationError - malformed change-set, disallowed column, missing PK
StorageError       - connectivity or query failure in the data layer
"""


class EditorError(Exception):
    """Base class for all editor errors"""


class InvalidIdentifier(EditorError, ValueError):
    """Raised when a table or column name cannot be used in generated SQL"""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Invalid identifier: {name}")


class ChangeValidationError(EditorError):
    """Raised before any storage mutation when a change-set is rejected"""


class StorageError(EditorError):
    """Raised when the database fails to execute a read or a batch update"""
