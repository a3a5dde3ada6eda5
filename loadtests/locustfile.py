"""Production Floor Load Testing — Locust entry point.

Discovers all user classes from the scenarios package.
Run specific scenarios with Locust's class selection or use --tags.

Usage:
    # All scenarios (web UI):
    locust -f loadtests/locustfile.py

    # Staff working orders only:
    locust -f loadtests/locustfile.py ProductionUser

    # Lock contention:
    locust -f loadtests/locustfile.py ContendedOrderUser

    # Headless (CI mode):
    locust -f loadtests/locustfile.py ProductionUser QueueWatcherUser --headless \
           -u 50 -r 5 -t 300s --csv=results/loadtest
"""

import logging
import time

import requests
from locust import events

# Import all user classes so Locust discovers them
from loadtests.helpers.response import extract_error_detail
from loadtests.scenarios.production import (  # noqa: F401
    ContendedOrderUser,
    ProductionUser,
    QueueWatcherUser,
)

logger = logging.getLogger("loadtest")


@events.request.add_listener
def on_request(request_type, name, response, exception, **_kw):
    """Log error details for every failed request.

    Fires globally for all scenarios — no per-task wiring needed.
    Extracts the API error body so you see "Step 0 is already in progress"
    instead of just "409".
    """
    if exception:
        logger.error("[EXCEPTION] %s %s: %s", request_type, name, exception)
    elif response is not None and response.status_code >= 400:
        detail = extract_error_detail(response)
        logger.error("[%s] %s %s: %s", response.status_code, request_type, name, detail)


@events.test_start.add_listener
def on_test_start(environment, **_kwargs):
    """Log a marker when load test begins."""
    print(f"\n[LOADTEST] Started at {time.strftime('%H:%M:%S')}")
    print(f"[LOADTEST] Target host: {environment.host}")
    print()


@events.test_stop.add_listener
def on_test_stop(environment, **_kwargs):
    """Print the final queue counts when test ends."""
    print(f"\n[LOADTEST] Stopped at {time.strftime('%H:%M:%S')}")
    try:
        resp = requests.get(f"{environment.host}/queues", timeout=5)
        print("[LOADTEST] Final queue counts:")
        for queue, count in resp.json().items():
            print(f"  {queue}: {count}")
        print()
    except Exception as e:
        print(f"[LOADTEST] Could not fetch queue counts: {e}\n")
