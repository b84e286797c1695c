"""Mentor matching for pre-med mentees."""

__version__ = "0.1.0"
