"""Split calculation, balance aggregation and supporting services."""
