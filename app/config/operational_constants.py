"""
Operational constants.

Time limits and batch sizes for background work.
"""

# DRAMATIQ TASK TIME LIMITS (milliseconds)

# Single query checks (accrual gate, payout day)
DRAMATIQ_TIME_LIMIT_SHORT = 60_000

# Checks that also write one notification per investment
DRAMATIQ_TIME_LIMIT_STANDARD = 300_000

# Max outbox rows written per check run
NOTIFICATION_BATCH_LIMIT = 1000
