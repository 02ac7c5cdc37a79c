import pytest

from habitify import auth
from habitify.errors import EmailTaken, InvalidCredentials, ValidationError

ROUNDS = 4


def test_register_and_login(store):
    user = auth.register_user(store, " Ada@Example.com ", "s3cret", "Ada", rounds=ROUNDS)
    assert user.email == "ada@example.com"
    assert user.password_hash != "s3cret"
    assert not user.is_admin
    assert (user.xp, user.level) == (0, 1)

    assert auth.login_user(store, "ada@example.com", "s3cret").id == user.id


def test_wrong_password(store):
    auth.register_user(store, "ada@example.com", "s3cret", rounds=ROUNDS)
    with pytest.raises(InvalidCredentials):
        auth.login_user(store, "ada@example.com", "wrong")


def test_unknown_email(store):
    with pytest.raises(InvalidCredentials):
        auth.login_user(store, "ghost@example.com", "whatever")


def test_duplicate_registration(store):
    auth.register_user(store, "ada@example.com", "s3cret", rounds=ROUNDS)
    with pytest.raises(EmailTaken):
        auth.register_user(store, "ADA@example.com", "other", rounds=ROUNDS)


def test_admin_email_is_admin(store, monkeypatch):
    monkeypatch.setattr(auth, "ADMIN_EMAIL", "Boss@Example.com")
    assert auth.register_user(store, "boss@example.com", "pw", rounds=ROUNDS).is_admin


@pytest.mark.parametrize("email,password", [("", "pw"), ("not-an-email", "pw"), ("ada@example.com", "")])
def test_register_validation(store, email, password):
    with pytest.raises(ValidationError):
        auth.register_user(store, email, password, rounds=ROUNDS)


def test_non_bcrypt_hash_never_matches():
    assert not auth.check_password("anything", "not-a-real-hash")
