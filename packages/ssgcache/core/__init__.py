"""Core cache engine, filesystem, configuration and logging layers."""
