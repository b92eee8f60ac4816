"""Shared telemetry attributes for the embedding and search boundaries."""

AI_PROVIDER = "ai.provider"
AI_OPERATION = "ai.operation"
AI_MODEL = "ai.model"
AI_RETRYABLE = "ai.retryable"
AI_ERROR_TYPE = "ai.error_type"
AI_LATENCY_MS = "ai.latency_ms"

SEARCH_KIND = "search.kind"
SEARCH_MODE = "search.mode"
SEARCH_LIMIT = "search.limit"
SEARCH_AUTHENTICATED = "search.authenticated"
SEARCH_CANDIDATE_COUNT = "search.candidate_count"
SEARCH_RESULT_COUNT = "search.result_count"
