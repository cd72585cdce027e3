"""
Shared building blocks for the API: DB pool, settings, logging, errors and
the SQL fragment builder. Person-specific SQL and logic live in `persons/`.
"""
