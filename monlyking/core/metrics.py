"""
Business metrics exposed next to the HTTP metrics on the Prometheus endpoint.
"""
from prometheus_client import Counter

ORDERS_CREATED = Counter(
    "monlyking_orders_created_total",
    "Orders placed into escrow",
    ["game"],
)

ORDERS_SETTLED = Counter(
    "monlyking_orders_settled_total",
    "Orders confirmed by the buyer and paid out to the seller",
)

COMMISSION_COLLECTED = Counter(
    "monlyking_commission_collected_total",
    "Commission retained on settled orders, in the marketplace currency",
)

MESSAGES_SENT = Counter(
    "monlyking_messages_sent_total",
    "Chat messages stored",
    ["type", "filtered"],
)

WALLET_REQUESTS = Counter(
    "monlyking_wallet_requests_total",
    "Top-up and withdrawal requests by outcome",
    ["type", "status"],
)
