"""Prometheus exporter for Proxmox VE clusters."""

__version__ = "1.0.0"
