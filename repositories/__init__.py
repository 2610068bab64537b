"""
repositories/ - Data Access Layer
==================================
Each repository encapsulates all SQL queries for a specific domain entity.
Repositories validate what they write, re-validate what they read back,
and return domain model objects.
"""
