"""Football scores, tables and rankings for MeshCore mesh networks"""

__version__ = "0.1.0"
