"""CLI package for triggering and verifying hourly details updates."""

__all__ = []
