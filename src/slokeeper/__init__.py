"""Reconcile Sumo Logic SLO library SLOs with declarative configuration."""

__version__ = "0.1.0"
