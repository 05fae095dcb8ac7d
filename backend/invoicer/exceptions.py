"""
Error taxonomy for the invoicing service.

Column edit errors are raised synchronously by the engine before any state
changes. Persistence errors wrap failures from the document store adapters.
"""


class InvoicerError(Exception):
    """Base class for all invoicer errors"""


class ColumnEditError(InvoicerError):
    """A custom column insert or remove was rejected"""


class DuplicateColumnError(ColumnEditError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Column '{name}' already exists")


class ColumnNotFoundError(ColumnEditError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Column '{name}' not found")


class InvalidReferenceError(ColumnEditError):
    def __init__(self, reference: str):
        self.reference = reference
        super().__init__(f"Reference column '{reference}' does not exist")


class InvalidColumnNameError(ColumnEditError):
    def __init__(self, name: str):
        self.name = name
        super().__init__("Column name must not be empty")


class PersistenceError(InvoicerError):
    """Opaque failure from the document store"""

    def __init__(self, message: str, operation: str = None, path: str = None):
        self.operation = operation
        self.path = path
        super().__init__(message)


class PermissionDeniedError(PersistenceError):
    """The current user may not access the requested record"""


class RecordNotFoundError(PersistenceError):
    pass


class TemplateGenerationError(InvoicerError):
    pass


class StorageError(InvoicerError):
    """Logo storage backend failure"""
