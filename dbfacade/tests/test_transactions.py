from __future__ import annotations

from dbfacade import Database


def test_commit_persists(users_db, db_path):
    assert users_db.begin_transaction()
    assert users_db.in_transaction
    assert users_db.set("users", {"id": 1, "email": "a@b.com"})
    assert users_db.set("users", {"id": 2, "email": "c@d.com"})
    assert users_db.commit_transaction()
    assert not users_db.in_transaction

    other = Database(db_path)
    try:
        assert len(other.get("users")) == 2
    finally:
        other.close()


def test_rollback_discards(users_db):
    users_db.set("users", {"id": 1, "email": "a@b.com"})
    assert users_db.begin_transaction()
    users_db.set("users", {"id": 2, "email": "c@d.com"})
    users_db.update("users", {"email": "changed@b.com"}, "id = 1")
    users_db.delete("users", "id = 1")
    assert users_db.rollback_transaction()
    assert users_db.get("users") == [{"id": 1, "email": "a@b.com", "age": None}]


def test_commit_without_begin_fails(users_db, log_lines):
    assert users_db.commit_transaction() is False
    assert "Failed to commit transaction" in log_lines()[-1]


def test_rollback_without_begin_fails(users_db, log_lines):
    assert users_db.rollback_transaction() is False
    assert "Failed to roll back transaction" in log_lines()[-1]


def test_nested_begin_fails(users_db, log_lines):
    assert users_db.begin_transaction()
    assert users_db.begin_transaction() is False
    assert "Failed to begin transaction" in log_lines()[-1]
    # the outer transaction is still usable
    assert users_db.set("users", {"id": 1})
    assert users_db.commit_transaction()
    assert len(users_db.get("users")) == 1


def test_failed_statement_does_not_end_transaction(users_db):
    assert users_db.begin_transaction()
    assert users_db.set("users", {"id": 1})
    assert users_db.set("users", {"id": 1}) is False
    assert users_db.in_transaction
    assert users_db.rollback_transaction()
    assert users_db.get("users") == []
