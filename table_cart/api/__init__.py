"""HTTP surface for the table cart."""
