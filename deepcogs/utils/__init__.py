"""Shared utilities: structured logging, error hierarchy, name normalization."""
