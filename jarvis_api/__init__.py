"""
Terminal Jarvis stats API - resilient client layer and landing page endpoints.
"""

__version__ = "0.1.0"
