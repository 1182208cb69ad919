"""Shared pytest fixtures for oakwire tests."""

import pytest

from oakwire.container import Container
from oakwire.providers import Lifetime


@pytest.fixture()
def container() -> Container:
    """Empty container with singleton as the default lifetime."""
    return Container()


@pytest.fixture()
def container_transient() -> Container:
    """Empty container with transient as the default lifetime."""
    return Container(default_lifetime=Lifetime.TRANSIENT)
