"""
daemonparams - Configuration resolution for a build daemon client

Resolves the effective settings of a long-lived build daemon from explicit
overrides, process properties, layered property files, environment variables
and computed defaults, reading each source only when a value is needed.

Package Structure:
- core/config/: resolution engine (sources, chains, property files, coercion)
- core/daemon_parameters.py: the per-setting chains and derived views
- core/utils/: logging helpers
- cli/: command-line inspection of resolved settings
"""

__version__ = "0.42"
