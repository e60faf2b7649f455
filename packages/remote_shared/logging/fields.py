"""Canonical structured logging field names.

Remote repository logs share one key set so dashboards and log queries do not
drift between repository subtypes.
"""

TIMESTAMP = "timestamp"
LEVEL = "level"
LOGGER = "logger"
MESSAGE = "message"
EVENT = "event"
SERVICE = "service"
ENVIRONMENT = "environment"

# Remote call fields.
API_SERVICE = "api.service"
API_ENDPOINT = "api.endpoint"
API_METHOD = "api.method"
API_STATUS = "api.status"
API_RETRY_COUNT = "api.retry_count"
REQUEST_HEADERS = "request.headers"
DURATION_MS = "duration_ms"
OUTCOME = "outcome"

# Failure fields.
ERROR_TYPE = "error_type"
ERROR_MESSAGE = "error_message"
ERRORS = "errors"
FAILURE_CATEGORY = "failure_category"
RETRY_ATTEMPT = "retry_attempt"
BACKOFF_SECONDS = "backoff_seconds"

# Cache and identifier fields.
REPOSITORY = "repository"
LOOKUP_TYPE = "lookup_type"
IDENTIFIERS = "identifiers"
CACHE_KEY = "cache_key"
CACHE_TTL = "cache_ttl"
INVALID_COUNT = "invalid_count"
VALID_COUNT = "valid_count"
TOTAL_COUNT = "total_count"
INVALID_IDS = "invalid_ids"

# Event names.
REQUEST_STARTED_EVENT = "remote_request_started"
REQUEST_COMPLETED_EVENT = "remote_request_completed"
REQUEST_RETRY_EVENT = "remote_request_retry"
FAILURE_CLASSIFIED_EVENT = "remote_failure_classified"
IDS_REJECTED_EVENT = "remote_ids_rejected"
NEGATIVE_CACHE_HIT_EVENT = "negative_cache_hit"
NEGATIVE_CACHE_STORE_EVENT = "negative_cache_store"
DEGRADED_RESULT_EVENT = "remote_degraded_result"
TIMING_EVENT = "remote_repository_timing"
