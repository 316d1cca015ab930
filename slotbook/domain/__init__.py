"""Domain types that carry no persistence concerns."""
