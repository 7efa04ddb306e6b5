import pytest

from titanvanguard.storage import DataUser, UserDatabase


@pytest.fixture
def db():
    database = UserDatabase(":memory:")
    yield database
    database.close()


def test_data_user_defaults():
    user = DataUser("alice")
    assert (user.score, user.points, user.can_double_bullet_speed, user.can_reduce_reload_time) == (0, 0, False, -1)


def test_add_and_get_round_trip(db):
    user = DataUser("alice", score=3, points=250, can_double_bullet_speed=True, can_reduce_reload_time=2)
    db.add_user(user)
    assert db.get_user("alice") == user


def test_missing_user_is_none(db):
    assert db.get_user("nobody") is None


def test_add_replaces_existing(db):
    db.add_user(DataUser("alice", score=1))
    db.add_user(DataUser("alice", score=5))
    assert db.all_users() == [DataUser("alice", score=5)]


def test_all_users(db):
    users = [DataUser("alice"), DataUser("bob", points=10)]
    for user in users:
        db.add_user(user)
    assert sorted(db.all_users(), key=lambda u: u.username) == users


def test_update_user(db):
    db.add_user(DataUser("alice"))
    db.update_user(DataUser("alice", score=4, points=100))
    assert db.get_user("alice") == DataUser("alice", score=4, points=100)


def test_update_missing_user_adds_nothing(db):
    db.update_user(DataUser("ghost", score=4))
    assert db.all_users() == []


def test_delete_user(db):
    db.add_user(DataUser("alice"))
    db.add_user(DataUser("bob"))
    db.delete_user("alice")
    assert db.get_user("alice") is None
    assert db.get_user("bob") == DataUser("bob")


def test_persists_across_connections(tmp_path):
    path = tmp_path / "users.sqlite"
    with UserDatabase(path) as first:
        first.add_user(DataUser("carol", score=2))
    with UserDatabase(path) as second:
        assert second.get_user("carol") == DataUser("carol", score=2)