"""HTTP routers — status and generation endpoints."""
