"""
Seqcheck: workload driver and sequential-consistency checker.

Drives write/read workloads against a serializable SQL database through a
deadline-bounded, conflict-retrying executor, then checks the recorded
history for reads that observed one writer's inserts out of order.
"""

__version__ = "0.1.0"
