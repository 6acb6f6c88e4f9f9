"""Core engine for the fast filter stage."""
