"""
nestdoc exceptions

Base exception hierarchy for all nestdoc modules
"""


class NestDocError(Exception):
    """
    Base exception for all nestdoc errors
    
    Module-specific exceptions (storages, trees) inherit from this class
    so callers can catch everything raised by the package in one place.
    """
    pass


class ConfigurationError(NestDocError):
    """Configuration or initialization error"""
    pass


class ValidationError(NestDocError):
    """Data validation error"""
    pass


class ResourceError(NestDocError):
    """Resource access or management error"""
    pass


class TreeError(NestDocError):
    """Base exception for tree errors"""
    pass


class ParentNotFoundError(TreeError):
    """A referenced parent does not exist when resolving a subtree query"""
    
    def __init__(self, parent_ref):
        super().__init__(f"Parent not found: {parent_ref!r}")
        self.parent_ref = parent_ref


class NodeNotFoundError(TreeError):
    """A node referenced by identity or primary key does not exist"""
    
    def __init__(self, ref):
        super().__init__(f"Node not found: {ref!r}")
        self.ref = ref


class InconsistentStateError(TreeError):
    """
    Stored coordinates violate the nested-set invariants
    
    Only expected after a partially failed rebuild or a concurrent writer
    outside the tree's lock.
    """
    
    def __init__(self, violations: list[str]):
        preview = "; ".join(violations[:5])
        more = f" (+{len(violations) - 5} more)" if len(violations) > 5 else ""
        super().__init__(f"Inconsistent tree state: {preview}{more}")
        self.violations = violations
