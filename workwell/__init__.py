"""
WorkWell: burnout scoring and workload redistribution engine.
"""

__version__ = "0.3.0"
