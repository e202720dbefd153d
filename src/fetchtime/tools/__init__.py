"""Tool contract, registry and the built-in FetchTime tools."""
