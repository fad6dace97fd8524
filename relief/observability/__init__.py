"""
Observability for Insta-Relief: loguru logging setup and Prometheus metrics.
"""
