"""Configuration objects and recipe loading."""
