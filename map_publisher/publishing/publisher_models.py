"""
Wire models for the map gallery web service.

Request bodies are emitted with PascalCase keys, which is what the gallery
server binds against. Response bodies are accepted with snake_case,
PascalCase or camelCase keys. Raw image buffers travel as base64 strings.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, AliasGenerator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel, to_pascal


def _wire_aliases(field_name: str) -> AliasChoices:
    return AliasChoices(field_name, to_pascal(field_name), to_camel(field_name))


class WireModel(BaseModel):
    """Base model for everything exchanged with the gallery server."""

    model_config = ConfigDict(
        alias_generator=AliasGenerator(
            validation_alias=_wire_aliases,
            serialization_alias=to_pascal,
        ),
        populate_by_name=True,
        ser_json_bytes="base64",
        val_json_bytes="base64",
    )


class MapInfo(WireModel):
    """Map metadata plus the optional raw images that belong to it."""
    id: Optional[int] = None
    category_id: Optional[int] = None
    date: Optional[datetime] = None
    name: Optional[str] = None
    organiser: Optional[str] = None
    country: Optional[str] = None
    discipline: Optional[str] = None
    relay_leg: Optional[str] = None
    map_name: Optional[str] = None
    result_list_url: Optional[str] = None
    comment: Optional[str] = None
    map_image_file_extension: Optional[str] = None
    map_image_data: Optional[bytes] = None
    blank_map_image_data: Optional[bytes] = None

    def clear_image_data(self) -> None:
        """Drop both raw image buffers."""
        self.map_image_data = None
        self.blank_map_image_data = None


class Category(WireModel):
    """A gallery category."""
    id: Optional[int] = None
    name: Optional[str] = None


class UploadOutcome(WireModel):
    """Result of uploading a single file to the upload endpoint."""
    success: bool = False
    error_message: Optional[str] = None
    file_name: Optional[str] = None


class PublishOutcome(WireModel):
    """Result of a publish call as seen by the caller."""
    success: bool = False
    error_message: Optional[str] = None
    url: Optional[str] = None


class ConnectResult(WireModel):
    """Result of an explicit authentication exchange."""
    success: bool = False
    error_message: Optional[str] = None


class GetAllCategoriesResult(WireModel):
    success: bool = False
    error_message: Optional[str] = None
    categories: List[Category] = []


class GetAllMapsResult(WireModel):
    success: bool = False
    error_message: Optional[str] = None
    maps: List[MapInfo] = []


class AuthenticationTokenResponse(WireModel):
    """Body returned by the token endpoint."""
    access_token: str
    expires_in: int
    token_type: Optional[str] = None


class PublishPreUploadedMapRequest(WireModel):
    """
    Body of the publish call.

    The map images are referenced by the file names the upload endpoint
    assigned to them rather than being embedded.
    """
    map_info: MapInfo
    pre_uploaded_map_image_file_name: Optional[str] = None
    pre_uploaded_blank_map_image_file_name: Optional[str] = None
    pre_uploaded_thumbnail_image_file_name: Optional[str] = None

    def to_wire(self) -> Dict[str, Any]:
        """JSON-ready dictionary with the server's key names."""
        return self.model_dump(mode="json", by_alias=True)
