"""
Pagemark: positioned markup over paginated documents.
"""
__version__ = "0.1.0"
