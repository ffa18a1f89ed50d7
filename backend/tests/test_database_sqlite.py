"""
Postboard Backend: Query Executor Integration Tests (SQLite)
==============================================================

What:  The persistence layer against a real aiosqlite database file.
How:   Tables are created per test in tmp_path (see conftest.engine).

What we test:
    ✅ `?` placeholders are rewritten to named binds and counted
    ✅ SQLAlchemy errors surface as StorageError with the cause chained
    ✅ transaction() commits on success and rolls back on error
    ✅ a new user's posts relation is an empty list
    ✅ two instances of one row: field-level last-write-wins
    ✅ deleting a user cascades to their posts
    ✅ a save retried after a storage error hashes the password once
"""

import pytest
from sqlalchemy.exc import SQLAlchemyError

from app.database import bind_positional
from app.exceptions import StorageError
from app.models.user import verify_password


class TestBindPositional:
    def test_rewrites_in_order(self):
        sql, binds = bind_positional("SELECT * FROM t WHERE a = ? AND b = ?", [1, "x"])
        assert sql == "SELECT * FROM t WHERE a = :p0 AND b = :p1"
        assert binds == {"p0": 1, "p1": "x"}

    def test_count_mismatch_raises(self):
        with pytest.raises(ValueError):
            bind_positional("SELECT * FROM t WHERE a = ?", [])


class TestExecutor:
    @pytest.mark.asyncio
    async def test_insert_reports_generated_key(self, executor):
        result = await executor.execute(
            "INSERT INTO users (name, email, password) VALUES (?, ?, ?)",
            ["Ann", "ann@x.com", "pw"],
        )
        assert result.insert_id == 1
        assert result.rowcount == 1

        rows = (await executor.execute("SELECT name FROM users WHERE id = ?", [1])).rows
        assert rows == [{"name": "Ann"}]

    @pytest.mark.asyncio
    async def test_values_are_bound_not_interpolated(self, executor):
        hostile = "x'); DROP TABLE users; --"
        await executor.execute(
            "INSERT INTO users (name, email, password) VALUES (?, ?, ?)",
            [hostile, "h@x.com", "pw"],
        )
        rows = (await executor.execute("SELECT name FROM users", [])).rows
        assert rows == [{"name": hostile}]

    @pytest.mark.asyncio
    async def test_driver_error_becomes_storage_error(self, executor):
        with pytest.raises(StorageError) as exc_info:
            await executor.execute("SELECT * FROM missing_table", [])
        assert isinstance(exc_info.value.__cause__, SQLAlchemyError)
        assert exc_info.value.original is exc_info.value.__cause__

    @pytest.mark.asyncio
    async def test_ping(self, executor):
        assert await executor.ping() is True


class TestTransactions:
    @pytest.mark.asyncio
    async def test_commit(self, executor, registry):
        async with executor.transaction():
            await registry["users"].create({"name": "Ann", "email": "a@x.com", "password": "Secret1"})
            await registry["users"].create({"name": "Bob", "email": "b@x.com", "password": "Secret1"})

        assert len(await registry["users"].all()) == 2

    @pytest.mark.asyncio
    async def test_rollback_on_error(self, executor, registry):
        with pytest.raises(RuntimeError):
            async with executor.transaction():
                await registry["users"].create({"name": "Ann", "email": "a@x.com", "password": "Secret1"})
                raise RuntimeError("abort")

        assert await registry["users"].all() == []

    @pytest.mark.asyncio
    async def test_constraint_violation_rolls_back_whole_block(self, executor, registry):
        users = registry["users"]
        with pytest.raises(StorageError):
            async with executor.transaction():
                await users.create({"name": "Ann", "email": "dup@x.com", "password": "Secret1"})
                await users.create({"name": "Bob", "email": "dup@x.com", "password": "Secret1"})

        assert await users.all() == []


class TestActiveRecordScenarios:
    @pytest.mark.asyncio
    async def test_new_user_has_no_posts(self, registry):
        ann = await registry["users"].create({"name": "Ann", "email": "ann@x.com", "password": "pw"})

        assert ann.persisted is True
        assert ann.get_key() is not None
        assert await ann.load("posts") == []

    @pytest.mark.asyncio
    async def test_password_is_hashed_on_save(self, registry):
        users = registry["users"]
        ann = await users.create({"name": "Ann", "email": "ann@x.com", "password": "pw"})

        stored = await users.find(ann.get_key())
        assert stored.get_attribute("password") != "pw"
        assert stored.get_attribute("password").startswith("$2")

    @pytest.mark.asyncio
    async def test_last_write_wins_per_field(self, registry):
        users = registry["users"]
        ann = await users.create({"name": "Ann", "email": "ann@x.com", "password": "pw"})

        a = await users.find(ann.get_key())
        b = await users.find(ann.get_key())

        a.set_attribute("name", "Annie")
        await a.save()
        b.set_attribute("status", "inactive")
        await b.save()

        fresh = await users.find(ann.get_key())
        assert fresh.get_attribute("name") == "Annie"
        assert fresh.get_attribute("status") == "inactive"

    @pytest.mark.asyncio
    async def test_duplicate_email_surfaces_as_storage_error(self, registry):
        users = registry["users"]
        await users.create({"name": "Ann", "email": "ann@x.com", "password": "pw"})

        with pytest.raises(StorageError):
            await users.create({"name": "Other", "email": "ann@x.com", "password": "pw"})

    @pytest.mark.asyncio
    async def test_retry_after_failed_insert_hashes_password_once(self, registry):
        users = registry["users"]
        await users.create({"name": "Ann", "email": "ann@x.com", "password": "pw"})
        other = users.new({"name": "Other", "email": "ann@x.com", "password": "Secret123"})

        with pytest.raises(StorageError):
            await other.save()
        assert other.get_attribute("password") == "Secret123"
        assert other.persisted is False

        other.set_attribute("email", "other@x.com")
        await other.save()

        fresh = await users.find(other.get_key())
        assert await verify_password(fresh, "Secret123")

    @pytest.mark.asyncio
    async def test_retry_after_failed_update_hashes_password_once(self, registry):
        users = registry["users"]
        await users.create({"name": "Ann", "email": "ann@x.com", "password": "pw"})
        bob = await users.create({"name": "Bob", "email": "bob@x.com", "password": "pw"})
        bob.fill({"email": "ann@x.com", "password": "Better123"})

        with pytest.raises(StorageError):
            await bob.save()

        bob.set_attribute("email", "robert@x.com")
        await bob.save()

        fresh = await users.find(bob.get_key())
        assert fresh.get_attribute("email") == "robert@x.com"
        assert await verify_password(fresh, "Better123")

    @pytest.mark.asyncio
    async def test_post_round_trip_and_belongs_to(self, registry):
        ann = await registry["users"].create({"name": "Ann", "email": "ann@x.com", "password": "pw"})
        post = await registry["posts"].create(
            {"title": "Hello", "content": "Body of the post", "user_id": ann.get_key()}
        )

        loaded = await registry["posts"].find_or_fail(post.get_key())
        author = await loaded.load("user")

        assert loaded.get_attribute("status") == "draft"
        assert loaded.get_attribute("created_at").tzinfo is not None
        assert author.get_key() == ann.get_key()

    @pytest.mark.asyncio
    async def test_deleting_user_cascades_to_posts(self, registry):
        ann = await registry["users"].create({"name": "Ann", "email": "ann@x.com", "password": "pw"})
        await registry["posts"].create({"title": "Hello", "content": "Body", "user_id": ann.get_key()})

        assert await registry["users"].destroy(ann.get_key()) is True
        assert await registry["posts"].all() == []

    @pytest.mark.asyncio
    async def test_refresh_reloads_and_clears_relations(self, registry):
        users = registry["users"]
        ann = await users.create({"name": "Ann", "email": "ann@x.com", "password": "pw"})
        await ann.load("posts")

        other = await users.find(ann.get_key())
        other.set_attribute("name", "Annie")
        await other.save()

        await ann.refresh()
        assert ann.get_attribute("name") == "Annie"
        assert ann.relation_loaded("posts") is False
