"""Core services and storage."""
