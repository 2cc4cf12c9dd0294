"""Configuration — probe catalog loading."""
