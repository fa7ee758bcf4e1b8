"""Core context optimization functionality."""
