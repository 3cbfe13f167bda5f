"""SQL implementations of the repository interfaces."""
