"""Configuration: API key management."""
