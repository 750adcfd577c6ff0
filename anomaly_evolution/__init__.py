"""Evolutionary anomaly detection for time series."""

__version__ = '0.1.0'
