"""SQL Smart Search: natural-language queries over SQL performance telemetry"""

__version__ = "1.0.0"
