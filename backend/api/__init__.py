"""HTTP boundary for the social graph service."""
