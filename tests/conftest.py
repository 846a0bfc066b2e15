import pytest

from django_restify.defaults import set_custom_defaults
from django_restify.schema import ModelRegistry


@pytest.fixture
def registry():
    return ModelRegistry()


@pytest.fixture(autouse=True)
def reset_custom_defaults():
    yield
    set_custom_defaults(None)
