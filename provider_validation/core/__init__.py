"""Core infrastructure: configuration, store handle, errors and collaborators."""
