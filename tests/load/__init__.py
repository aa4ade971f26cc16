"""Load testing suite using Locust.

Drives one benchmark route with a staged virtual-user profile to compare:
- Throughput under default and lowered work_mem
- Response time percentiles (p50, p95, p99)
- Check pass rate ("status is 200")
"""
