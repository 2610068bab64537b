"""
db/ - Database Layer
====================
Handles PostgreSQL connections, schema initialization, and the thin
query facade the repositories run their parameterized SQL through.
This layer is the lowest in the architecture and has no dependencies on other layers.
"""
