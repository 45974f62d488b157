"""
Freight Planner - demand/supply planning for transportation lanes.
"""

__version__ = "1.0.0"
