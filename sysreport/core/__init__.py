"""Core engine: models, catalog loading, execution and rendering."""
