"""Interactive order management over a relational database."""
