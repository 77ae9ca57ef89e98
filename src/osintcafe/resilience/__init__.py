"""Error taxonomy and exception classification."""
