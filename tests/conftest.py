"""Test configuration and fixtures for stockroom."""

from tests.fixtures import *  # noqa: F401,F403
