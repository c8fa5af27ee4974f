"""Tests for database seeding."""

from quotedesk.auth import authenticate_user, verify_password
from quotedesk.models import Agent, Category, Item, User
from quotedesk.seed import ADMIN_USER, DEMO_AGENTS, DEMO_CATEGORIES, DEMO_ITEMS, seed_admin_user, seed_demo_catalog


class TestSeedAdminUser:
    """Tests for seed_admin_user."""

    def test_creates_admin_on_empty_database(self, db):
        assert seed_admin_user(db) is True
        db.commit()

        admin = db.query(User).one()
        assert admin.role == "Admin"
        assert admin.email == ADMIN_USER["email"].lower()
        assert verify_password(ADMIN_USER["password"], admin.password_hash)

    def test_email_normalized_for_login(self, db, monkeypatch):
        monkeypatch.setitem(ADMIN_USER, "email", "  Ops.Admin@QuoteDesk.Local ")

        seed_admin_user(db)
        db.commit()

        assert db.query(User).one().email == "ops.admin@quotedesk.local"
        assert authenticate_user(db, "ops.admin@quotedesk.local", ADMIN_USER["password"]) is not None

    def test_skips_when_users_exist(self, db, user):
        assert seed_admin_user(db) is False
        assert db.query(User).count() == 1


class TestSeedDemoCatalog:
    """Tests for seed_demo_catalog."""

    def test_creates_everything_once(self, db):
        expected = len(DEMO_AGENTS) + len(DEMO_CATEGORIES) + len(DEMO_ITEMS)

        assert seed_demo_catalog(db) == expected
        db.commit()
        assert seed_demo_catalog(db) == 0
        db.commit()

        assert db.query(Agent).count() == len(DEMO_AGENTS)
        assert db.query(Category).count() == len(DEMO_CATEGORIES)
        assert db.query(Item).count() == len(DEMO_ITEMS)

    def test_items_linked_to_categories(self, db):
        seed_demo_catalog(db)
        db.commit()

        fiber = db.query(Item).filter(Item.name == "Fiber Circuit 100M").one()
        assert fiber.category.name == "Dedicated Fiber"
