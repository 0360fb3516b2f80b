import pytest

from tests.factories import api_client_for
from tests.factories import create_user


@pytest.fixture
def user(db):
    return create_user("alice", first_name="Alice")


@pytest.fixture
def other_user(db):
    return create_user("bob", first_name="Bob")


@pytest.fixture
def third_user(db):
    return create_user("carol", first_name="Carol")


@pytest.fixture
def api_client(user):
    return api_client_for(user)
