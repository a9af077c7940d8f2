"""Small self-contained utilities (dice)."""
