"""QuoteDesk: quotes, commissions and circuit tracking for a telecom reseller."""
