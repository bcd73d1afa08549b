"""
NodeGroup autoscaler: scales NodeGroup custom resources on node utilization
"""

__version__ = "1.0.0"
