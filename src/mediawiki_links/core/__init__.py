"""Core utilities: exceptions and logging configuration."""
