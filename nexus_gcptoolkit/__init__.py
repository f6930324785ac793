"""Nexus secrets and connection helpers backed by GCP Secret Manager."""

__version__ = "0.1.0"
