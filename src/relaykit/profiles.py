"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: profiles.py.
"""

from __future__ import annotations

from .runtime.contracts import CachePolicy, CircuitBreakerPolicy, TimeoutPolicy


PROFILES = {
    "development": {
        "strategy": "default",
        "timeout": TimeoutPolicy(attempt_timeout_s=60.0),
        "breaker": CircuitBreakerPolicy(failure_threshold=8, reset_timeout_s=10.0, half_open_max_calls=2),
        "cache": CachePolicy(enabled=False, ttl_s=15.0),
    },
    "production": {
        "strategy": "api_call",
        "timeout": TimeoutPolicy(attempt_timeout_s=30.0),
        "breaker": CircuitBreakerPolicy(failure_threshold=5, reset_timeout_s=60.0, half_open_max_calls=1),
        "cache": CachePolicy(enabled=True, ttl_s=3600.0),
    },
    "low_latency": {
        "strategy": "default",
        "timeout": TimeoutPolicy(attempt_timeout_s=10.0),
        "breaker": CircuitBreakerPolicy(failure_threshold=3, reset_timeout_s=15.0, half_open_max_calls=1),
        "cache": CachePolicy(enabled=True, ttl_s=600.0),
    },
}
