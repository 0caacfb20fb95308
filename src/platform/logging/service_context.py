"""
Service context extraction for log traceability.

Identifies which process emitted a line when several API workers and the
expiry reaper write to the same sink.
"""

import os
from functools import lru_cache


@lru_cache(maxsize=1)
def get_service_context() -> str:
    service_name = os.getenv('SERVICE_NAME', 'cinema-booking')
    deploy_env = os.getenv('DEPLOY_ENV', 'local_dev')
    hostname = os.getenv('HOSTNAME', '')

    # Containers expose a short hostname; locally fall back to the PID
    instance = hostname[:12] if hostname else str(os.getpid())

    return f'{service_name}@{deploy_env}:{instance}'
