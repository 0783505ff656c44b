"""
REST client for the map gallery web service.

Publishing is a two-phase protocol: every image is first sent to the upload
endpoint on its own, then the map metadata is published with references to
the file names the server assigned to those uploads.
"""

from typing import Optional, Type, TypeVar

import requests
from pydantic import ValidationError

from ..config.config_module import (
    PUBLISHER_PASSWORD_KEY,
    PUBLISHER_REQUEST_TIMEOUT_KEY,
    PUBLISHER_URL_KEY,
    PUBLISHER_USERNAME_KEY,
    get_config,
    get_float_config,
)
from ..config.logger_module import log_debug, log_info, log_warning, log_error
from .publisher_base import MapPublisher
from .publisher_errors import DecodeError, PublisherError, TransportError
from .publisher_models import (
    ConnectResult,
    GetAllCategoriesResult,
    GetAllMapsResult,
    MapInfo,
    PublishOutcome,
    PublishPreUploadedMapRequest,
    UploadOutcome,
    WireModel,
)
from .publisher_session import Credentials, Session, TokenManager
from .publisher_thumbnail import (
    DEFAULT_THUMBNAIL_SETTINGS,
    ThumbnailSettings,
    derive_thumbnail,
    select_thumbnail_source,
)


ResultModel = TypeVar("ResultModel", bound=WireModel)

DEFAULT_MAP_IMAGE_EXTENSION = "jpg"


def _is_success(response: requests.Response) -> bool:
    return 200 <= response.status_code < 300


class RestApiPublisher(MapPublisher):
    """
    Publishes maps to the gallery over its REST API.

    One instance owns one authenticated session; protected calls renew the
    bearer token when it is missing or about to expire.
    """

    USER_AGENT = "MapPublisher/1.0"

    def __init__(self,
                 web_service_url: str = None,
                 username: str = None,
                 password: str = None,
                 request_timeout: Optional[float] = None,
                 http_session: requests.Session = None,
                 thumbnail_settings: ThumbnailSettings = None):
        """
        Initialize the publisher.

        Args:
            web_service_url: Base URL of the gallery API (loaded from config if not provided)
            username: Account name (loaded from config if not provided)
            password: Account password (loaded from config if not provided)
            request_timeout: HTTP timeout in seconds, None for no timeout
            http_session: Session to send requests through
            thumbnail_settings: Thumbnail geometry and quality
        """
        url = web_service_url or get_config(PUBLISHER_URL_KEY)
        if not url:
            raise ValueError("PUBLISHER_URL not provided or found in config")
        self._web_service_url = url

        if request_timeout is None:
            request_timeout = get_float_config(PUBLISHER_REQUEST_TIMEOUT_KEY)
        self.request_timeout = request_timeout

        self.thumbnail_settings = thumbnail_settings or DEFAULT_THUMBNAIL_SETTINGS

        self._session = http_session or requests.Session()
        self._session.headers.update({
            'User-Agent': self.USER_AGENT
        })

        credentials = Credentials(
            username=username or get_config(PUBLISHER_USERNAME_KEY),
            password=password or get_config(PUBLISHER_PASSWORD_KEY),
        )
        self._tokens = TokenManager(
            credentials=credentials,
            token_url=self.endpoint_url("token"),
            http_session=self._session,
            request_timeout=self.request_timeout
        )

        log_info(f"RestApiPublisher initialized for {self.web_service_url}")

    @property
    def web_service_url(self) -> str:
        """Base URL, always ending with exactly one slash."""
        return self._web_service_url.rstrip("/") + "/"

    @web_service_url.setter
    def web_service_url(self, value: str) -> None:
        self._web_service_url = value
        self._tokens.token_url = self.endpoint_url("token")

    @property
    def session(self) -> Session:
        """The current authentication session."""
        return self._tokens.session

    @property
    def token_manager(self) -> TokenManager:
        return self._tokens

    def endpoint_url(self, name: str) -> str:
        return f"{self.web_service_url}{name}"

    def _send(self, method: str, name: str, **kwargs) -> requests.Response:
        """
        Send a request to a named endpoint.

        Raises:
            TransportError: If the request could not be completed
        """
        url = self.endpoint_url(name)
        log_debug(f"{method} {url}")

        try:
            response = self._session.request(
                method,
                url,
                timeout=self.request_timeout,
                **kwargs
            )
        except requests.exceptions.RequestException as e:
            log_error(f"Request error calling {url}: {e}")
            raise TransportError(f"Request to {url} failed: {str(e)}")

        log_debug(f"HTTP {response.status_code} from {url}")
        return response

    def _decode(self, response: requests.Response, model: Type[ResultModel]) -> ResultModel:
        """
        Parse a response body into a result model.

        Raises:
            DecodeError: If the body is missing or has the wrong shape
        """
        try:
            return model.model_validate_json(response.content)
        except ValidationError as e:
            log_error(f"Unreadable {model.__name__} body: {e}")
            raise DecodeError("Response content error")

    def publish(self, map_info: MapInfo) -> PublishOutcome:
        """
        Upload the map's images and publish it.

        Workflow:
        1. Upload the map image and the blank map image when present
        2. Derive the thumbnail from whichever image exists and upload it
        3. Reference the uploaded file names, unless an upload failed
        4. Publish the metadata without the raw image buffers

        The caller's MapInfo is left untouched.

        Args:
            map_info: Map metadata and raw images

        Returns:
            PublishOutcome; failures of any kind are reported here, never raised
        """
        map_name = getattr(map_info, "name", None)
        log_info(f"Publishing map '{map_name}'")

        try:
            request = PublishPreUploadedMapRequest(map_info=map_info.model_copy())
            working = request.map_info

            has_images = (working.map_image_data is not None
                          or working.blank_map_image_data is not None)
            extension = working.map_image_file_extension
            if not extension and has_images:
                log_warning(
                    f"No map image file extension given, "
                    f"using '{DEFAULT_MAP_IMAGE_EXTENSION}'"
                )
                extension = DEFAULT_MAP_IMAGE_EXTENSION

            map_upload = None
            if working.map_image_data is not None:
                map_upload = self.partial_file_upload(working.map_image_data, extension)

            blank_map_upload = None
            if working.blank_map_image_data is not None:
                blank_map_upload = self.partial_file_upload(working.blank_map_image_data, extension)

            thumbnail_upload = None
            thumbnail_data = derive_thumbnail(
                select_thumbnail_source(working), self.thumbnail_settings
            )
            if thumbnail_data is not None:
                thumbnail_upload = self.partial_file_upload(
                    thumbnail_data, self.thumbnail_settings.extension
                )

            uploads = [map_upload, blank_map_upload, thumbnail_upload]
            if all(upload is None or upload.success for upload in uploads):
                if map_upload is not None:
                    request.pre_uploaded_map_image_file_name = map_upload.file_name
                if blank_map_upload is not None:
                    request.pre_uploaded_blank_map_image_file_name = blank_map_upload.file_name
                if thumbnail_upload is not None:
                    request.pre_uploaded_thumbnail_image_file_name = thumbnail_upload.file_name
            else:
                # TODO: decide with the gallery maintainers whether a failed upload should abort the publish
                log_warning(
                    "At least one image upload failed, publishing without "
                    "pre-uploaded image references"
                )

            # Already uploaded, must not be sent again
            working.clear_image_data()

            response = self._publish_pre_uploaded_map(request)

            if response.success:
                log_info(f"Published map '{working.name}' at {response.url}")
            else:
                log_warning(f"Gallery rejected map '{working.name}': {response.error_message}")

            return PublishOutcome(
                success=response.success,
                error_message=response.error_message,
                url=response.url
            )

        except Exception as e:
            log_error(f"Failed to publish map '{map_name}': {e}")
            return PublishOutcome(
                success=False,
                error_message=str(e) or type(e).__name__
            )

    def _publish_pre_uploaded_map(self, request: PublishPreUploadedMapRequest) -> PublishOutcome:
        self._tokens.ensure_valid_session()

        response = self._send("POST", "publish", json=request.to_wire())

        if not _is_success(response):
            log_error(f"HTTP {response.status_code} publishing map")
            return PublishOutcome(success=False, error_message="Error publishing map")

        try:
            return self._decode(response, PublishOutcome)
        except DecodeError as e:
            return PublishOutcome(success=False, error_message=str(e))

    def partial_file_upload(self, data: bytes, extension: str) -> UploadOutcome:
        """
        Upload one file ahead of the publish call.

        Args:
            data: File contents
            extension: File extension without the dot

        Returns:
            The server's UploadOutcome, or a failed outcome when the response
            is not a success or cannot be read

        Raises:
            AuthenticationError: If the session had to be renewed and that failed
            TransportError: If the upload request could not be sent
        """
        self._tokens.ensure_valid_session()

        log_info(f"Uploading file.{extension} ({len(data)} bytes)")

        response = self._send(
            "POST",
            "upload",
            files={"file": (f"file.{extension}", data)},
            data={"extension": extension}
        )

        if not _is_success(response):
            log_error(f"HTTP {response.status_code} uploading file.{extension}")
            return UploadOutcome(success=False, error_message="Error uploading map image")

        try:
            outcome = self._decode(response, UploadOutcome)
        except DecodeError as e:
            return UploadOutcome(success=False, error_message=str(e))

        if outcome.success:
            log_info(f"Uploaded file.{extension} as {outcome.file_name}")
        else:
            log_warning(f"Upload of file.{extension} rejected: {outcome.error_message}")

        return outcome

    def connect(self) -> ConnectResult:
        """
        Authenticate with the stored credentials right away.

        Returns:
            ConnectResult with the failure message when authentication fails
        """
        try:
            self._tokens.authenticate()
        except PublisherError as e:
            log_error(f"Failed to connect to {self.web_service_url}: {e}")
            return ConnectResult(success=False, error_message=str(e))

        return ConnectResult(success=True)

    def get_all_categories(self) -> GetAllCategoriesResult:
        return self._get_listing("allcategories", GetAllCategoriesResult)

    def get_all_maps(self) -> GetAllMapsResult:
        return self._get_listing("allmaps", GetAllMapsResult)

    def _get_listing(self, name: str, model: Type[ResultModel]) -> ResultModel:
        try:
            response = self._send("GET", name)
        except TransportError as e:
            return model(success=False, error_message=str(e))

        if not _is_success(response):
            log_error(f"HTTP {response.status_code} from {name}")
            return model(success=False)

        try:
            return self._decode(response, model)
        except DecodeError as e:
            return model(success=False, error_message=str(e))
