"""
Document store exceptions
"""

from ..exceptions import ResourceError


class StoreUnavailableError(ResourceError):
    """
    Raised when an underlying store operation fails
    
    Wraps driver-level failures (network, timeout, write errors) so that
    callers never have to import backend-specific exception types.
    """
    
    def __init__(self, message: str, operation: str = ""):
        super().__init__(message)
        self.operation = operation
