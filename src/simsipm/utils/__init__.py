"""Small helpers shared across simsipm."""
