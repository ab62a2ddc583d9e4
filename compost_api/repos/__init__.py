class StoreError(Exception):
    """Raised by a store when the backing database fails a read or write."""
