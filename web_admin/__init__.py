"""HTTP boundary for redirect signals."""
