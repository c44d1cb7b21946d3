"""Configuration, logging, geometry and performance helpers."""
