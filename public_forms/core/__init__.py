"""Configuration, logging context and clock."""
