"""Supabase persistence: one module per table, plus the shared client."""
