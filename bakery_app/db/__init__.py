"""Database models and SQL execution."""
