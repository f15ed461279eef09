"""Ports (hexagonal architecture boundaries)."""
