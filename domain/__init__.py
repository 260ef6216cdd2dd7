"""Domain entities and rules for the vehicle marketplace (pure, no I/O)."""
