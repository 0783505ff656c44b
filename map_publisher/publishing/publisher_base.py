"""
Abstract map publisher.

Any gallery backend the application can publish to implements this
interface, so callers do not depend on a particular transport.
"""

from abc import ABC, abstractmethod

from .publisher_models import (
    ConnectResult,
    GetAllCategoriesResult,
    GetAllMapsResult,
    MapInfo,
    PublishOutcome,
)


class MapPublisher(ABC):
    """Abstract base class for map publishing destinations."""

    @abstractmethod
    def publish(self, map_info: MapInfo) -> PublishOutcome:
        """
        Publish a map with its images.

        Args:
            map_info: Map metadata and raw images

        Returns:
            Outcome with the published map's URL on success. Implementations
            report failures through the outcome instead of raising.
        """
        pass

    @abstractmethod
    def connect(self) -> ConnectResult:
        """Authenticate against the destination."""
        pass

    @abstractmethod
    def get_all_categories(self) -> GetAllCategoriesResult:
        """List the categories maps can be published into."""
        pass

    @abstractmethod
    def get_all_maps(self) -> GetAllMapsResult:
        """List the maps already published."""
        pass
