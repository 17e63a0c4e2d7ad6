"""Logging, configuration, credentials and provider API clients."""
