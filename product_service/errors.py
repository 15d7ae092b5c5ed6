class PersistenceError(Exception):
    """Raised when the database rejects or fails a store operation."""
