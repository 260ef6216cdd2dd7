"""Application services orchestrating domain rules and repositories."""
