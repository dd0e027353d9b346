"""HTTP routers of the dashboard service."""
