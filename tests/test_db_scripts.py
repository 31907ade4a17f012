"""
Tests for the database maintenance commands.
"""

import pytest
from sqlalchemy import inspect, select, func

from app.models.agent import Agent
from app.models.image import PropertyImage
from app.models.property import Property
from app.models.user import User, UserRole
from scripts import db as db_script
from tests.conftest import test_engine, TestSessionLocal


async def table_names():
    async with test_engine.connect() as conn:
        return await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())


async def count(model) -> int:
    async with TestSessionLocal() as session:
        return (await session.execute(select(func.count()).select_from(model))).scalar_one()


class TestMigrateAndPrune:
    """Test schema creation and removal."""

    async def test_prune_drops_every_table(self):
        """Every table is dropped and reported."""
        before = await table_names()

        dropped = await db_script.prune(test_engine)

        assert sorted(dropped) == sorted(before)
        assert await table_names() == []

    async def test_prune_empty_database(self):
        """Pruning an empty schema is a no-op."""
        await db_script.prune(test_engine)

        assert await db_script.prune(test_engine) == []

    async def test_migrate_is_idempotent(self):
        """Migrating twice recreates the schema without errors."""
        await db_script.prune(test_engine)

        await db_script.migrate(test_engine)
        await db_script.migrate(test_engine)

        assert {"users", "agents", "properties", "stories"} <= set(await table_names())

    async def test_prune_refuses_production(self, monkeypatch):
        """Production databases need --force."""
        monkeypatch.setattr(db_script.settings, "environment", "production")

        with pytest.raises(RuntimeError, match="--force"):
            await db_script.prune(test_engine)

        assert await table_names() != []


class TestSeed:
    """Test demo data seeding."""

    async def test_seed_counts(self):
        """Seeding reports the rows it upserted."""
        counts = await db_script.seed(TestSessionLocal)

        assert counts == {"categories": 4, "users": 4, "agents": 3, "properties": 6}
        assert await count(User) == 4
        assert await count(Agent) == 3
        assert await count(Property) == 6
        assert await count(PropertyImage) == 6

    async def test_seed_is_idempotent(self):
        """Running the seed twice doesn't duplicate rows."""
        await db_script.seed(TestSessionLocal)
        await db_script.seed(TestSessionLocal)

        assert await count(User) == 4
        assert await count(Property) == 6
        assert await count(PropertyImage) == 6

    async def test_seeded_accounts(self):
        """Seeded agents are linked to agent-role accounts."""
        await db_script.seed(TestSessionLocal)

        async with TestSessionLocal() as session:
            admin = (await session.execute(
                select(User).where(User.email == db_script.ADMIN_EMAIL)
            )).scalar_one()
            agents = (await session.execute(select(Agent))).scalars().all()

            assert admin.role == UserRole.ADMIN
            assert admin.verify_password(db_script.ADMIN_PASSWORD)
            assert all(agent.user is not None and agent.user.role == UserRole.AGENT for agent in agents)

    def test_upsert_rejects_unknown_dialect(self):
        """Only dialects with ON CONFLICT support can be seeded."""
        with pytest.raises(ValueError, match="not supported"):
            db_script.upsert("oracle", User, [{"email": "a@example.com"}], "email")


class TestCommandLine:
    """Test the command line entry point."""

    def test_no_command(self, capsys):
        """Without a command the help is printed."""
        assert db_script.main([]) == 1
        assert "migrate" in capsys.readouterr().out
