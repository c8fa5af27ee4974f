from quotedesk.services.commission import (
    calculate_commission,
    resolve_commission_rate,
    calculate_markup_and_commission,
    get_markup_validation_message,
)
from quotedesk.services.quote_numbers import (
    next_quote_number,
    next_version,
    create_quote_revision,
)
from quotedesk.services.quotes import (
    calculate_line_item_total,
    calculate_totals_by_charge_type,
    recalculate_quote,
    approve_quote,
)
from quotedesk.services.circuit_tracking import (
    materialize,
    load_tracking_board,
    update_stage,
    update_progress,
    add_milestone,
)

__all__ = [
    'calculate_commission',
    'resolve_commission_rate',
    'calculate_markup_and_commission',
    'get_markup_validation_message',
    'next_quote_number',
    'next_version',
    'create_quote_revision',
    'calculate_line_item_total',
    'calculate_totals_by_charge_type',
    'recalculate_quote',
    'approve_quote',
    'materialize',
    'load_tracking_board',
    'update_stage',
    'update_progress',
    'add_milestone',
]
