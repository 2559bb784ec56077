"""Explainable matching, relevance and trust scoring for a job marketplace."""

__version__ = "0.1.0"
