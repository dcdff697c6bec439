"""HTTP API for deductit."""
