"""Prometheus metrics shared by the routers and the routing pipeline."""

from prometheus_client import Counter, Histogram

api_requests_total = Counter('api_requests_total', 'Total API requests', ['method', 'endpoint', 'status'])
api_request_duration = Histogram('api_request_duration_seconds', 'API request duration')

agents_resolve_duration = Histogram('agents_resolve_duration_seconds', 'Time to resolve the candidate agents list')
quota_fallback_total = Counter('quota_fallback_total', 'Requests where every candidate was at quota')
identity_cache_refresh_total = Counter('identity_cache_refresh_total', 'Identity mapping refreshes', ['outcome'])
booking_load_failures_total = Counter('booking_load_failures_total', 'Booking load aggregations aborted by a fetch error')
