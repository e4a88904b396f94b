"""ORM models for the stock kernel."""

from stock_kernel.models.state_document import SNAPSHOT_ROW_ID, StateDocument

__all__ = [
    "SNAPSHOT_ROW_ID",
    "StateDocument",
]
