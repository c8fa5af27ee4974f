"""
Tests for the circuit tracking board.

Tests:
- Which quote items get virtual rows
- Merging stored rows with virtual rows
- Promoting virtual rows before stage/progress/milestone changes
"""

import pytest
from decimal import Decimal
from unittest.mock import MagicMock
from sqlalchemy.exc import OperationalError

from quotedesk.models import (
    Category,
    CircuitMilestone,
    CircuitTracking,
    ClientInfo,
    Item,
    Order,
    Quote,
    QuoteItem,
)
from quotedesk.services.circuit_tracking import (
    is_trackable_item,
    parse_tracking_id,
    materialize,
    load_tracking_board,
    promote_virtual,
    update_stage,
    update_progress,
    add_milestone,
)


@pytest.fixture
def order(db, user):
    """An approved quote with one circuit, one install fee and one broadband line."""
    fiber = Category(name="Dedicated Fiber", type="Circuit")
    broadband = Category(name="Broadband", type="Circuit")
    db.add_all([fiber, broadband])
    db.flush()

    circuit = Item(name="Fiber Circuit A", description="100M dedicated fiber",
                   category_id=fiber.id, price=650, cost=480)
    plain = Item(name="Broadband", category_id=broadband.id, price=140, cost=95)
    db.add_all([circuit, plain])
    db.flush()

    client_info = ClientInfo(company_name="Acme Dental")
    db.add(client_info)
    db.flush()

    quote = Quote(user_id=user.id, client_info_id=client_info.id, quote_number="3500",
                  amount=Decimal("2290"), status="approved")
    quote.line_items = [
        QuoteItem(item_id=circuit.id, quantity=1, unit_price=650, total_price=650,
                  charge_type="MRC", sort_order=0),
        QuoteItem(name="Fiber Install", quantity=1, unit_price=1500, total_price=1500,
                  charge_type="NRC", sort_order=1),
        QuoteItem(item_id=plain.id, quantity=1, unit_price=140, total_price=140,
                  charge_type="MRC", sort_order=2),
    ]
    db.add(quote)
    db.flush()

    order = Order(quote_id=quote.id, order_number="ORD-2026-034-1405123",
                  user_id=user.id, amount=quote.amount)
    db.add(order)
    db.commit()
    return order


def line(order, position):
    return order.quote.line_items[position]


class TestIsTrackableItem:
    """Tests for the quote item name filter."""

    def test_specific_circuit_name(self):
        assert is_trackable_item("Fiber Circuit A", "Dedicated Fiber")

    def test_broadband_never_tracked(self):
        assert not is_trackable_item("Broadband", "Internet")
        assert not is_trackable_item("BROADBAND", None)

    def test_name_matching_category(self):
        assert not is_trackable_item("dedicated fiber", "Dedicated Fiber")

    def test_short_names(self):
        assert not is_trackable_item("DIA", None)
        assert not is_trackable_item("  T1  ", None)
        assert is_trackable_item("T1 Line", None)

    def test_general_items(self):
        assert not is_trackable_item("General Labor", None)
        assert not is_trackable_item("Misc (general)", None)

    def test_missing_name(self):
        assert not is_trackable_item(None, "Dedicated Fiber")
        assert not is_trackable_item("", None)


class TestParseTrackingId:
    """Tests for board ids."""

    def test_real_id(self):
        assert parse_tracking_id("42") == (False, 42)

    def test_virtual_id(self):
        assert parse_tracking_id("virtual-7") == (True, 7)

    def test_garbage(self):
        with pytest.raises(LookupError):
            parse_tracking_id("virtual-abc")
        with pytest.raises(LookupError):
            parse_tracking_id("circuit-1")


class TestMaterialize:
    """Tests for merging stored rows with virtual rows."""

    def test_virtual_rows_for_untracked_items(self, order):
        entries = materialize([], [order])

        # Broadband line is filtered out
        assert [e.id for e in entries] == [
            f"virtual-{line(order, 0).id}",
            f"virtual-{line(order, 1).id}",
        ]
        first = entries[0]
        assert first.is_virtual
        assert first.stage == "Ready to Order"
        assert first.progress_percentage == 0
        assert first.order_id == order.id
        assert first.order_number == order.order_number
        assert first.quote_number == "3500"
        assert first.client_company == "Acme Dental"
        assert first.item_name == "Fiber Circuit A"
        assert first.item_description == "100M dedicated fiber"
        assert first.circuit_type == "Dedicated Fiber"

    def test_stored_row_suppresses_virtual_row(self, db, order):
        row = CircuitTracking(order_id=order.id, quote_item_id=line(order, 0).id,
                              stage="Ordered", progress_percentage=25)
        db.add(row)
        db.commit()

        entries = materialize([row], [order])

        ids = [e.id for e in entries]
        assert ids == [str(row.id), f"virtual-{line(order, 1).id}"]
        assert entries[0].stage == "Ordered"
        assert entries[0].progress_percentage == 25
        assert not entries[0].is_virtual

    def test_stored_rows_always_included(self, db, order):
        """Stored rows are kept even for items the name filter would skip."""
        row = CircuitTracking(order_id=order.id, quote_item_id=line(order, 2).id,
                              stage="Installed")
        db.add(row)
        db.commit()

        entries = materialize([row], [order])
        assert str(row.id) in [e.id for e in entries]

    def test_no_orders(self):
        assert materialize([], []) == []

    def test_load_tracking_board(self, db, order):
        db.add(CircuitTracking(order_id=order.id, quote_item_id=line(order, 1).id,
                               stage="Site Survey"))
        db.commit()

        entries = load_tracking_board(db)

        assert len(entries) == 2
        assert entries[0].stage == "Site Survey"
        assert entries[1].id == f"virtual-{line(order, 0).id}"


class TestPromotion:
    """Tests for changes made through virtual ids."""

    def test_stage_update_on_virtual_row(self, db, order):
        quote_item = line(order, 0)

        row = update_stage(f"virtual-{quote_item.id}", "Ordered", db)
        db.commit()

        rows = db.query(CircuitTracking).all()
        assert len(rows) == 1
        assert rows[0].id == row.id
        assert rows[0].stage == "Ordered"
        assert rows[0].quote_item_id == quote_item.id
        assert rows[0].order_id == order.id
        assert rows[0].item_name == "Fiber Circuit A"
        assert rows[0].circuit_type == "Dedicated Fiber"

    def test_promoted_row_replaces_virtual_row(self, db, order):
        quote_item = line(order, 0)
        update_progress(f"virtual-{quote_item.id}", 40, db)
        db.commit()

        ids = [e.id for e in load_tracking_board(db)]
        assert f"virtual-{quote_item.id}" not in ids
        assert len(ids) == 2

    def test_second_promotion_reuses_row(self, db, order):
        quote_item = line(order, 0)
        first = promote_virtual(quote_item.id, db)
        second = promote_virtual(quote_item.id, db)
        db.commit()

        assert first.id == second.id
        assert db.query(CircuitTracking).count() == 1

    def test_failed_insert_writes_nothing(self, db, order, monkeypatch):
        quote_item = line(order, 0)
        monkeypatch.setattr(
            db, "flush", MagicMock(side_effect=OperationalError("INSERT", {}, Exception("disk full")))
        )

        with pytest.raises(OperationalError):
            update_stage(f"virtual-{quote_item.id}", "Ordered", db)

        monkeypatch.undo()
        db.rollback()
        assert db.query(CircuitTracking).count() == 0

    def test_unknown_quote_item(self, db, order):
        with pytest.raises(LookupError):
            update_stage("virtual-9999", "Ordered", db)

    def test_unknown_real_row(self, db, order):
        with pytest.raises(LookupError):
            update_stage("9999", "Ordered", db)

    def test_invalid_input_does_not_promote(self, db, order):
        quote_item = line(order, 0)

        with pytest.raises(ValueError):
            update_stage(f"virtual-{quote_item.id}", "   ", db)
        with pytest.raises(ValueError):
            update_progress(f"virtual-{quote_item.id}", 101, db)
        with pytest.raises(ValueError):
            update_progress(f"virtual-{quote_item.id}", -1, db)

        assert db.query(CircuitTracking).count() == 0

    def test_progress_on_real_row(self, db, order):
        row = CircuitTracking(order_id=order.id, quote_item_id=line(order, 0).id)
        db.add(row)
        db.commit()

        update_progress(str(row.id), 100, db)
        db.commit()
        assert row.progress_percentage == 100


class TestAddMilestone:
    """Tests for milestones on tracking rows."""

    def test_milestone_on_virtual_row(self, db, order):
        quote_item = line(order, 0)

        milestone = add_milestone(
            f"virtual-{quote_item.id}",
            {"milestone_name": "Site survey booked", "status": "in_progress"},
            db,
        )
        db.commit()

        row = db.query(CircuitTracking).one()
        assert milestone.circuit_tracking_id == row.id
        assert milestone.status == "in_progress"
        assert [m.milestone_name for m in row.milestones] == ["Site survey booked"]

    def test_default_status(self, db, order):
        milestone = add_milestone(
            f"virtual-{line(order, 0).id}", {"milestone_name": "FOC received"}, db
        )
        assert milestone.status == "pending"

    def test_invalid_milestone(self, db, order):
        tracking_id = f"virtual-{line(order, 0).id}"
        with pytest.raises(ValueError):
            add_milestone(tracking_id, {"milestone_name": ""}, db)
        with pytest.raises(ValueError):
            add_milestone(tracking_id, {"milestone_name": "Survey", "status": "done"}, db)

        assert db.query(CircuitMilestone).count() == 0
        assert db.query(CircuitTracking).count() == 0
