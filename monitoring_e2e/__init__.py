"""End-to-end checks of a cluster monitoring stack (Prometheus and Alertmanager)"""

__version__ = "0.1.0"
