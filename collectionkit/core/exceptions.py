"""Exception classes for collection processing."""


class CollectionError(Exception):
    """Base exception for collection processing errors."""

    pass


class ConfigurationError(CollectionError, ValueError):
    """Raised when collection options or a query cannot be evaluated.

    Configuration errors are never recovered from: they indicate that the
    caller declared operators, matchers or page sizes the engine cannot
    honor.
    """

    def __init__(self, message: str, *, property_key: str | None = None):
        """Initialize with message and the offending property, if any."""
        self.property_key = property_key
        if property_key:
            message = f"{message} (property: {property_key})"
        super().__init__(message)


class UnsupportedOperatorError(ConfigurationError):
    """Raised when an operator has no matching semantics."""

    def __init__(self, operator: str, property_key: str | None = None):
        """Initialize with operator symbol."""
        self.operator = operator
        super().__init__(
            f"Unsupported operator given: {operator!r}", property_key=property_key
        )


class QueryDecodeError(CollectionError, ValueError):
    """Raised when query wire data has an invalid shape."""

    def __init__(self, message: str, path: str = "query"):
        """Initialize with message and the location within the query."""
        self.path = path
        super().__init__(f"Invalid query at {path}: {message}")
