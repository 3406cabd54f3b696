"""Utility modules for session-reveal."""
