"""HTTP API for SpliceDesk."""
