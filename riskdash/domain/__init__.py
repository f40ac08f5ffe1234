"""Domain types and the pure risk-scoring model."""
