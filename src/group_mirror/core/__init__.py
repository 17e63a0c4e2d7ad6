"""Mirroring engine: path validation, preflight, filtering and execution."""
