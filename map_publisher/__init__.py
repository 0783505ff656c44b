"""
Map gallery publisher.

Publishes map images, blank maps and their metadata to a hosted gallery.
"""

__version__ = "1.0.0"
