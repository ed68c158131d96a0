"""Exception classes for the tool framework."""


class CodeToolAuthorizationDenied(Exception):
    """Exception raised when tool authorization is denied."""

    def __init__(self, message: str):
        """
        Initialize tool authorization denied error.

        Args:
            message: Error message
        """
        super().__init__(message)


class CodeToolExecutionError(Exception):
    """Exception raised when tool execution fails."""

    def __init__(self, message: str, kind: str = "underlying"):
        """
        Initialize tool execution error.

        Args:
            message: Error message
            kind: Classified failure kind, e.g. 'not_found' or 'invalid_arguments'
        """
        super().__init__(message)
        self.kind = kind
