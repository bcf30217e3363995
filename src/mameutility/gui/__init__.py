"""Optional Qt layer (install with the [gui] extra)."""
