import pytest

from simplerest import Router
from simplerest.base import HostBase


@pytest.fixture
def host() -> HostBase:
    return HostBase()


@pytest.fixture
def router() -> Router:
    return Router("api")
