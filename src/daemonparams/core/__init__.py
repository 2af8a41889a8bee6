"""Core resolution engine for daemon parameters."""
