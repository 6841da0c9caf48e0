"""
repositories/ - Data Access Layer
==================================
A Table encapsulates the SQL generated for one database table.
Rows come back as plain dicts.
"""
