"""
Exceptions raised by PrunArr
"""


class ConfigError(ValueError):
    """Missing or invalid configuration"""


class InventoryError(ValueError):
    """Inventory data that can't be trusted to base a deletion on"""


class DeleteRetriesExhausted(Exception):
    """A file deletion kept failing with transient errors"""

    def __init__(self, file_id: int, attempts: int, last_error: Exception):
        super().__init__(
            f"Giving up deleting episode file {file_id} after {attempts} attempts: "
            f"{last_error}"
        )
        self.file_id = file_id
        self.attempts = attempts
        self.last_error = last_error
