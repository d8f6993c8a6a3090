"""
Constants for server utilities

Single source of truth for service identity and route descriptions.
"""

SERVICE_NAME = "votetally API"
SERVICE_VERSION = "0.1.0"

# Route descriptions published by GET /
ENDPOINTS = {
    "vote": "GET /votar/{id}/{vote} - Record one vote for a subject",
    "query": "GET /query - Current tallies for every subject",
    "query_subject": "GET /query/{id} - Current tally for one subject",
    "graph": "GET /graph - Tallies shaped for chart rendering",
    "index": "GET /index.html - Voting page",
    "health": "GET /api/health - Health check with store statistics",
    "metrics": "GET /metrics - Prometheus metrics",
}
