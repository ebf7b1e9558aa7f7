"""Model backends that speak for each side of a debate."""
