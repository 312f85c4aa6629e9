"""AgroStock: FIFO inventory valuation and stock reconciliation."""

__version__ = "1.0.0"
