"""Configuration layer: settings, feeld.toml discovery and logging."""
