import pytest

from habitify.db_sqlite import SQLiteStore


@pytest.fixture
def store(tmp_path):
    return SQLiteStore(str(tmp_path / "habits.db"))


@pytest.fixture
def user(store):
    return store.create_user("ada@example.com", "Ada", "not-a-real-hash")


@pytest.fixture
def other_user(store):
    return store.create_user("bob@example.com", "Bob", "not-a-real-hash")


@pytest.fixture
def binary_habit(store, user):
    return store.create_habit(user.id, {"title": "Read", "category": "Education"})


@pytest.fixture
def quantity_habit(store, user):
    return store.create_habit(user.id, {
        "title": "Pushups", "category": "Health", "is_quantity": True, "goal_value": 10, "unit": "reps",
    })
