# /callscript/utils/metrics.py

from prometheus_client import Counter, Histogram, Gauge

# All Prometheus metrics used by the service live here.

# Navigation Metrics
navigation_transitions_counter = Counter(
    'navigation_transitions_total', 'Navigation session operations', ['operation', 'outcome']
)
dangling_reference_counter = Counter(
    'navigation_dangling_references_total', 'Button targets that did not resolve to a step'
)
active_sessions_gauge = Gauge('navigation_active_sessions', 'Operator sessions currently in a call')

# Script Administration Metrics
script_import_counter = Counter('script_imports_total', 'Script imports', ['status'])
auto_logout_counter = Counter('auto_logout_runs_total', 'Scheduled auto-logout runs')

# Performance Metrics
response_time_histogram = Histogram('response_time_seconds', 'Response time in seconds', ['endpoint'])
