"""Read-only web views over the check-in queues."""
