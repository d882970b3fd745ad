"""mail/ -- Outbound mail transport used by password recovery."""
