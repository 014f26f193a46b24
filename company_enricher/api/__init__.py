"""HTTP API for company enrichment."""
