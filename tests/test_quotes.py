"""
Unit tests for quote calculation service.

Tests:
- Line item total calculation (qty × unit_price)
- Quote rollup totals by charge type (MRC, NRC, total)
- Quote approval and order creation
"""

import re
import pytest
from datetime import datetime
from decimal import Decimal

from quotedesk.models import Order, Quote, QuoteItem
from quotedesk.services.quotes import (
    calculate_line_item_total,
    calculate_totals_by_charge_type,
    recalculate_quote,
    generate_order_number,
    approve_quote,
)

ORDER_NUMBER = re.compile(r"^ORD-\d{4}-\d{3}-\d{7}$")


class TestCalculateLineItemTotal:
    """Tests for line item total calculation."""

    def test_basic_calculation(self):
        """Basic quantity × unit_price calculation."""
        result = calculate_line_item_total(
            quantity=Decimal('10'),
            unit_price=Decimal('25.50')
        )
        assert result == Decimal('255.00')

    def test_fractional_quantity(self):
        result = calculate_line_item_total(
            quantity=Decimal('2.5'),
            unit_price=Decimal('100')
        )
        assert result == Decimal('250.00')

    def test_rounding(self):
        """Result should be rounded half up to 2 decimal places."""
        result = calculate_line_item_total(
            quantity=Decimal('3'),
            unit_price=Decimal('33.333')
        )
        # 3 × 33.333 = 99.999, rounded to 100.00
        assert result == Decimal('100.00')

    def test_half_cent_rounds_up(self):
        result = calculate_line_item_total(
            quantity=Decimal('1'),
            unit_price=Decimal('10.005')
        )
        assert result == Decimal('10.01')

    def test_zero_quantity(self):
        result = calculate_line_item_total(
            quantity=Decimal('0'),
            unit_price=Decimal('100')
        )
        assert result == Decimal('0')

    def test_none_values(self):
        """None quantity or price should return zero."""
        assert calculate_line_item_total(None, Decimal('100')) == Decimal('0')
        assert calculate_line_item_total(Decimal('3'), None) == Decimal('0')


class TestCalculateTotalsByChargeType:
    """Tests for MRC/NRC rollups."""

    def test_empty_items(self):
        result = calculate_totals_by_charge_type([])
        assert result['mrc_total'] == Decimal('0.00')
        assert result['nrc_total'] == Decimal('0.00')
        assert result['total_amount'] == Decimal('0.00')

    def test_mixed_items(self):
        items = [
            {'charge_type': 'MRC', 'total_price': Decimal('650.00')},
            {'charge_type': 'MRC', 'total_price': Decimal('140.00')},
            {'charge_type': 'NRC', 'total_price': Decimal('1500.00')},
        ]
        result = calculate_totals_by_charge_type(items)

        assert result['mrc_total'] == Decimal('790.00')
        assert result['nrc_total'] == Decimal('1500.00')
        assert result['total_amount'] == Decimal('2290.00')

    def test_unknown_charge_type_ignored(self):
        items = [
            {'charge_type': 'MRC', 'total_price': Decimal('100')},
            {'charge_type': 'OTHER', 'total_price': Decimal('999')},
        ]
        result = calculate_totals_by_charge_type(items)
        assert result['total_amount'] == Decimal('100.00')

    def test_missing_totals_count_as_zero(self):
        items = [
            {'charge_type': 'NRC', 'total_price': None},
            {'charge_type': 'NRC'},
            {'charge_type': 'NRC', 'total_price': 25.5},
        ]
        result = calculate_totals_by_charge_type(items)
        assert result['nrc_total'] == Decimal('25.50')


class TestRecalculateQuote:
    """Tests for recalculating a quote from its line items."""

    def test_sets_line_and_quote_totals(self):
        quote = Quote(quote_number="3500")
        quote.line_items = [
            QuoteItem(name="Fiber Circuit 100M", quantity=Decimal('2'),
                      unit_price=Decimal('650'), charge_type='MRC'),
            QuoteItem(name="Fiber Install", quantity=Decimal('1'),
                      unit_price=Decimal('1500'), charge_type='NRC'),
        ]

        totals = recalculate_quote(quote)

        assert quote.line_items[0].total_price == Decimal('1300.00')
        assert quote.line_items[1].total_price == Decimal('1500.00')
        assert quote.amount == Decimal('2800.00')
        assert totals['mrc_total'] == Decimal('1300.00')
        assert totals['nrc_total'] == Decimal('1500.00')

    def test_no_items(self):
        quote = Quote(quote_number="3500")
        recalculate_quote(quote)
        assert quote.amount == Decimal('0.00')


class TestGenerateOrderNumber:
    """Tests for order number format."""

    def test_format(self):
        number = generate_order_number(datetime(2026, 2, 3, 14, 5))
        assert ORDER_NUMBER.match(number)
        assert number.startswith("ORD-2026-034-1405")

    def test_defaults_to_now(self):
        assert ORDER_NUMBER.match(generate_order_number())


class TestApproveQuote:
    """Tests for approving a quote into an order."""

    @pytest.fixture
    def quote(self, db, user, agent):
        quote = Quote(
            user_id=user.id,
            agent_id=agent.id,
            quote_number="3500",
            amount=Decimal('1000'),
            commission=Decimal('150'),
            notes="Install before March",
        )
        db.add(quote)
        db.commit()
        return quote

    def test_creates_order(self, db, quote):
        order = approve_quote(quote, "Pat Buyer", db)
        db.commit()

        assert order.id is not None
        assert order.quote_id == quote.id
        assert ORDER_NUMBER.match(order.order_number)
        assert order.amount == Decimal('1000')
        assert order.commission == Decimal('150')
        assert order.notes == "Install before March"

        assert quote.status == "approved"
        assert quote.acceptance_status == "accepted"
        assert quote.accepted_by == "Pat Buyer"
        assert quote.accepted_at is not None

    def test_approving_twice_reuses_order(self, db, quote):
        first = approve_quote(quote, "Pat Buyer", db)
        db.commit()
        second = approve_quote(quote, None, db)
        db.commit()

        assert first.id == second.id
        assert db.query(Order).filter(Order.quote_id == quote.id).count() == 1
        # Name from the first acceptance is kept
        assert quote.accepted_by == "Pat Buyer"
