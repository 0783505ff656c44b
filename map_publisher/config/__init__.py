"""
Configuration and logging helpers for the map gallery publisher.
"""
