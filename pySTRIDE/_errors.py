class STRIDEError(Exception):
    """
    Base class for all pySTRIDE errors.

    Every error in pySTRIDE reflects a violated precondition of the caller.
    None of them are recoverable and none are retried; they are raised at the
    point of detection.
    """
    pass


class NotFoundError(STRIDEError, LookupError):
    """Lookup miss on an initialized entity (node, coordinate system, DOF)."""
    pass


class InvalidConfigurationError(STRIDEError, ValueError):
    """Inconsistent input: cardinality mismatch, invalid position, bad state."""
    pass


class OutOfRangeError(NotFoundError, IndexError):
    """Integer index outside the declared extents. A lookup miss as well."""
    pass
