import logging

from app.db.init_db import DEFAULT_USERNAME, init_db
from app.models import User


def test_creates_default_account_once(engine, db, caplog):
    with caplog.at_level(logging.WARNING, logger="app.db.init_db"):
        init_db(bind=engine)
        init_db(bind=engine)

    users = db.query(User).all()
    assert [u.username for u in users] == [DEFAULT_USERNAME]
    assert sum("Default account created" in r.getMessage() for r in caplog.records) == 1


def test_skips_default_account_when_users_exist(engine, db, user):
    init_db(bind=engine)

    assert db.query(User).filter(User.username == DEFAULT_USERNAME).count() == 0
