from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# HTTP
http_requests_total = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status']
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint']
)

# Catalog cache
cache_hits_total = Counter('cache_hits_total', 'Total cache hits')
cache_misses_total = Counter('cache_misses_total', 'Total cache misses')

db_queries_total = Counter('db_queries_total', 'Total database queries')

# Cart and enrollment outcomes
cart_conflicts_total = Counter('cart_conflicts_total', 'Cart additions rejected as duplicates')
enrollments_total = Counter(
    'enrollments_total',
    'Enrollment workflow runs',
    ['outcome']
)


def metrics_endpoint():
    """Prometheus exposition"""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
