"""Domain computation services used by the built-in tools."""
