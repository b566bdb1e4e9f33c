"""
Journey Canvas - interactive graph-canvas engine for designing use cases,
agent journeys and customer journeys.
"""

__version__ = "0.1.0"
