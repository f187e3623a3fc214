"""Adaptive job-application form filler for vacancy portals."""

__version__ = "0.3.0"
