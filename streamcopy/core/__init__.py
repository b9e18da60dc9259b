"""Core functionality: errors, logging and file operations."""
