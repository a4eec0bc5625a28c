"""Core oddments modules."""
