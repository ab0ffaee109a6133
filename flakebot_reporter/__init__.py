"""Flakebot reporter: ship CI test reports to Flakebot."""

__version__ = "0.1.0"
