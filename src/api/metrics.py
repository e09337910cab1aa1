from prometheus_client import Counter, Histogram, REGISTRY


# we check if they are already registered to avoid errors during hot reloads or test runs
def get_or_create_metric(name, documentation, metric_type, **kwargs):
    try:
        return metric_type(name, documentation, **kwargs)
    except ValueError:
        return REGISTRY._names_to_collectors[name]


REQUESTS_TOTAL = get_or_create_metric(
    "planner_requests_total",
    "Total requests",
    Counter,
    labelnames=["endpoint", "status"],
)

REQUEST_LATENCY_SECONDS = get_or_create_metric(
    "planner_request_latency_seconds",
    "Request latency",
    Histogram,
    labelnames=["endpoint"],
)

SLOT_SEARCHES_TOTAL = get_or_create_metric(
    "planner_slot_searches_total",
    "Slot searches by outcome",
    Counter,
    labelnames=["result"],
)

SESSIONS_PLANNED_TOTAL = get_or_create_metric(
    "planner_sessions_planned_total", "Total sessions placed on the calendar", Counter
)

URGENCY_TIER_TOTAL = get_or_create_metric(
    "planner_urgency_tier_total", "Distribution plans by urgency tier", Counter, labelnames=["tier"]
)
