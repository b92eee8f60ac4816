"""Prometheus metric definitions for search observability."""

from prometheus_client import Counter, Histogram

# --- Bucket configurations ---

EMBEDDING_LATENCY_BUCKETS = (0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)
SEARCH_LATENCY_BUCKETS = (0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0)
RESULT_COUNT_BUCKETS = (0, 1, 2, 5, 10, 20, 50)

# --- Embedding metrics ---

EMBEDDING_DURATION = Histogram(
    "library_api_embedding_duration_seconds",
    "Query embedding latency in seconds",
    ["provider", "model"],
    buckets=EMBEDDING_LATENCY_BUCKETS,
)

EMBEDDING_FAILURES = Counter(
    "library_api_embedding_failures_total",
    "Query embeddings that could not be produced",
    ["reason"],
)

# --- Search metrics ---

SEARCH_DURATION = Histogram(
    "library_api_search_duration_seconds",
    "End-to-end search latency in seconds",
    ["kind", "mode"],
    buckets=SEARCH_LATENCY_BUCKETS,
)

SEARCH_FALLBACKS = Counter(
    "library_api_search_fallbacks_total",
    "Searches that fell back from vector ranking to lexical matching",
    ["kind", "reason"],
)

SEARCH_RESULTS = Histogram(
    "library_api_search_results",
    "Number of results returned per search",
    ["kind", "mode"],
    buckets=RESULT_COUNT_BUCKETS,
)
