"""
Publishing module for the map gallery publisher.

This module provides functionality for:
- Authenticating against the gallery with an expiring bearer token
- Deriving the gallery thumbnail from a map image
- Uploading map images ahead of publishing
- Publishing map metadata that references the uploaded images
- Listing gallery categories and published maps

Main classes:
- RestApiPublisher: REST implementation of the MapPublisher interface
- MapPublisher: Abstract interface for publishing destinations
- TokenManager: Lazy bearer token renewal
- ThumbnailSettings: Thumbnail geometry and quality

Errors:
- PublisherError: Base exception for publishing module
- TransportError: HTTP level failures
- DecodeError: Unreadable response bodies
- AuthenticationError: Rejected credentials
"""

from .publisher_base import MapPublisher
from .publisher_client import RestApiPublisher
from .publisher_errors import (
    AuthenticationError,
    DecodeError,
    PublisherError,
    TransportError,
)
from .publisher_models import (
    Category,
    ConnectResult,
    GetAllCategoriesResult,
    GetAllMapsResult,
    MapInfo,
    PublishOutcome,
    PublishPreUploadedMapRequest,
    UploadOutcome,
)
from .publisher_session import Credentials, Session, TokenManager
from .publisher_thumbnail import (
    ThumbnailSettings,
    compute_crop_box,
    compute_destination_box,
    derive_thumbnail,
    select_thumbnail_source,
)

__all__ = [
    # Main classes
    "MapPublisher",
    "RestApiPublisher",
    "TokenManager",
    "Credentials",
    "Session",
    "ThumbnailSettings",

    # Thumbnail functions
    "derive_thumbnail",
    "select_thumbnail_source",
    "compute_crop_box",
    "compute_destination_box",

    # Models
    "MapInfo",
    "Category",
    "UploadOutcome",
    "PublishOutcome",
    "ConnectResult",
    "GetAllCategoriesResult",
    "GetAllMapsResult",
    "PublishPreUploadedMapRequest",

    # Errors
    "PublisherError",
    "TransportError",
    "DecodeError",
    "AuthenticationError",
]
