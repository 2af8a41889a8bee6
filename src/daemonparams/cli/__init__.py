"""Command-line interface for inspecting resolved daemon parameters."""
