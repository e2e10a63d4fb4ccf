"""Repository layer for metadata index access."""

from relay.repositories.file_repository import FileRepository

__all__ = ["FileRepository"]
