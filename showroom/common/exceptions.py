"""
Custom Exception Classes for the showroom catalog

Hierarchical exception structure. Startup-path problems are recoverable
and normally logged; publish-path problems are raised to the admin.
"""


class ShowroomError(Exception):
    """Base exception for all showroom errors"""

    def __init__(self, message: str, recoverable: bool = True):
        self.message = message
        self.recoverable = recoverable
        super().__init__(message)


class ConfigError(ShowroomError):
    """Invalid cloud settings or configuration file"""

    def __init__(self, message: str, recoverable: bool = True):
        super().__init__(f"Config Error: {message}", recoverable)


class SyncError(ShowroomError):
    """Remote document store errors"""

    def __init__(self, message: str, operation: str | None = None):
        self.operation = operation
        super().__init__(message, recoverable=True)


class PublishError(SyncError):
    """Publishing the catalog document failed"""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message, operation="publish")


class PayloadTooLargeError(PublishError):
    """Store rejected the document as too large (HTTP 413)"""

    def __init__(self, size_kb: float):
        self.size_kb = size_kb
        super().__init__(
            f"Upload failed: payload too large ({size_kb:.2f} KB) for the store's limit. "
            "Remove some images or use smaller ones.",
            status_code=413,
        )


class NotConfiguredError(SyncError):
    """Publish refused: admin cloud settings are disabled or incomplete"""

    def __init__(self, message: str = "Cloud settings incomplete"):
        super().__init__(message, operation="publish")


class CatalogError(ShowroomError):
    """Local catalog mutation errors (duplicate or unknown ids)"""


class ImportValidationError(CatalogError):
    """Import payload rejected"""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(f"Import rejected: {'; '.join(errors)}")
