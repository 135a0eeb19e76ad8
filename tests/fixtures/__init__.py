"""Shared pytest fixtures for product storage tests."""

from .storage import *  # noqa: F401,F403
