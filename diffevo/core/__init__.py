"""Core data model, worker pool and generation loop."""
