"""
utils/ - Shared Helpers
=======================
Logging setup, SQL text helpers and naming conversions.
"""
