"""Service layer for relay flows."""

from relay.services.relay_service import DeleteOutcome, DeleteResult, RelayService

__all__ = ["RelayService", "DeleteOutcome", "DeleteResult"]
