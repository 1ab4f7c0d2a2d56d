class InvalidStateTransition(Exception):
    """The requested operation is not allowed in the object's current state."""
