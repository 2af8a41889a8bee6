"""
Test suite for daemonparams.

Tests mirror the package layout: core/config/ for the resolution engine,
core/ for DaemonParameters and cli/ for the command line.
"""
