"""Activity feed service: aggregation, fan-out and read API."""
