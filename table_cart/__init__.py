"""Per-table session cart for multi-tenant restaurant ordering."""

__version__ = "1.0.0"
