"""Shared cross-cutting utilities: actor context, telemetry, generators."""
