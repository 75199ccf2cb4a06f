"""Factory functions wiring clients and services."""
