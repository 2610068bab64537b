"""
utils/ - Shared Helpers
=======================
Cross-cutting helpers with no dependencies on the other layers:
logging, identifiers, clocks and blur-hash checks.
"""
