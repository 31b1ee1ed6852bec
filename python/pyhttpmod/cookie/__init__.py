"""Cookie provider interfaces."""
