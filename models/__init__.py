"""
models/ - Domain Layer
======================
Dataclass entities for the catalog together with their validation rules.
Validation is pure: no I/O, no mutation, callable without a database.
"""
