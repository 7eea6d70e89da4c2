"""Object storage client."""
from .storage import ObjectStorage, Container, SERVICE_TYPE

__all__ = ["ObjectStorage", "Container", "SERVICE_TYPE"]
