"""Loaders and gnomAD-specific record rules built on the schema engine."""
