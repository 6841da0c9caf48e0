"""
db/ - Database Layer
====================
Handles the PostgreSQL connection pool, explicit transactions and the
query executor. This layer is the lowest in the architecture and only
depends on config, models and utils.
"""
