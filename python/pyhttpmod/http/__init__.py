"""HTTP utils classes and types."""
