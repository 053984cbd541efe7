"""Comment board service showing opbridge controllers end to end."""
