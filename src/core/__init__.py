"""Shared configuration, typed models, errors, and logging."""
