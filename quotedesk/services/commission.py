"""
Commission Calculation Service

Handles:
- Commission rate resolution (quote override > client override > agent rate)
- Commission amount calculation (rate / 100 × amount)
- Markup-based commission reduction for lines sold below category minimum
"""

import logging
from decimal import Decimal
from typing import Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError

from quotedesk.models.agent import Agent
from quotedesk.models.client_info import ClientInfo

logger = logging.getLogger(__name__)


def _to_decimal(value) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def resolve_commission_rate(
    agent_id: Optional[int],
    db,
    client_info_id: Optional[int] = None,
    quote_override=None,
    agents: Optional[Iterable[Agent]] = None,
) -> Optional[Decimal]:
    """
    Pick the single active commission rate for a transaction.

    Precedence is strict: the quote override if set, else the client-info
    override if set, else the agent's default rate.

    Args:
        agent_id: The agent earning the commission
        db: Database session
        client_info_id: Optional client company on the quote
        quote_override: Optional per-quote rate (percent)
        agents: Agents already loaded by the caller; looked up by id when None

    Returns:
        Rate in percent, or None when no override applies and the agent is unknown

    Raises:
        SQLAlchemyError: if a lookup fails. A failed lookup is not "no rate".
    """
    if quote_override is not None:
        return _to_decimal(quote_override)

    if client_info_id:
        try:
            override = (
                db.query(ClientInfo.commission_override)
                .filter(ClientInfo.id == client_info_id)
                .scalar()
            )
        except SQLAlchemyError:
            logger.error("Client override lookup failed for client_info %s", client_info_id)
            raise
        if override is not None:
            return _to_decimal(override)

    if agent_id is None:
        return None

    if agents is not None:
        agent = next((a for a in agents if a.id == agent_id), None)
    else:
        try:
            agent = db.query(Agent).filter(Agent.id == agent_id).first()
        except SQLAlchemyError:
            logger.error("Agent lookup failed for agent %s", agent_id)
            raise

    if agent is None:
        return None
    return _to_decimal(agent.commission_rate)


def calculate_commission(
    amount,
    agent_id: Optional[int],
    db,
    client_info_id: Optional[int] = None,
    quote_override=None,
    agents: Optional[Iterable[Agent]] = None,
) -> Decimal:
    """
    Calculate the commission amount to store on a quote or order.

    Returns 0 only when no override applies and the agent cannot be found.
    Lookup errors propagate so the caller can abort its write.
    """
    rate = resolve_commission_rate(
        agent_id,
        db,
        client_info_id=client_info_id,
        quote_override=quote_override,
        agents=agents,
    )
    if rate is None:
        return Decimal("0")
    return _to_decimal(amount) * rate / Decimal("100")


def calculate_markup_and_commission(
    cost, sell_price, agent_commission_rate, minimum_markup=None
) -> dict:
    """
    Work out how much commission an agent gives up when selling below the
    category's minimum markup. The reduction is capped at the agent's rate.

    Returns:
        Dictionary with:
        - minimum_markup
        - current_markup
        - max_markup_reduction
        - commission_reduction
        - final_commission_rate
        - is_valid
        - error_message
    """
    cost = _to_decimal(cost)
    sell_price = _to_decimal(sell_price)
    rate = _to_decimal(agent_commission_rate)
    minimum = _to_decimal(minimum_markup)

    if cost > 0:
        current_markup = (sell_price - cost) / cost * Decimal("100")
    else:
        current_markup = Decimal("0")

    max_markup_reduction = min(minimum, rate)
    markup_shortfall = max(Decimal("0"), minimum - current_markup)
    commission_reduction = min(markup_shortfall, rate)
    final_rate = max(Decimal("0"), rate - commission_reduction)

    error_message = None
    if current_markup < 0:
        error_message = "Sell price cannot be below cost"

    return {
        "minimum_markup": minimum,
        "current_markup": current_markup,
        "max_markup_reduction": max_markup_reduction,
        "commission_reduction": commission_reduction,
        "final_commission_rate": final_rate,
        "is_valid": current_markup >= 0,
        "error_message": error_message,
    }


def get_markup_validation_message(
    cost, sell_price, agent_commission_rate, minimum_markup=None
) -> Optional[str]:
    """Human-readable warning for a line's markup, or None if nothing to say."""
    calc = calculate_markup_and_commission(
        cost, sell_price, agent_commission_rate, minimum_markup
    )
    if not calc["is_valid"]:
        return calc["error_message"] or "Invalid markup configuration"

    if calc["commission_reduction"] > 0:
        return (
            f"Commission reduced by {calc['commission_reduction']:.1f}% due to markup "
            f"below minimum ({calc['minimum_markup']}%)"
        )
    return None
