"""Shared helpers: settings, logging, files, threads."""
