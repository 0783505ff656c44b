"""
Tests for the command line entry point.
"""

from datetime import datetime
from unittest.mock import patch

import pytest

from .main_cli import (
    EXIT_CONFIG_ERROR,
    EXIT_FAILURE,
    EXIT_OK,
    build_map_info,
    main,
    parse_arguments,
)
from .publishing.publisher_models import (
    Category,
    GetAllCategoriesResult,
    MapInfo,
    PublishOutcome,
)


@pytest.fixture(autouse=True)
def quiet_setup():
    """Keep logging and .env loading out of the tests."""
    with patch('map_publisher.main_cli.initialize_logger'):
        with patch('map_publisher.main_cli.load_config'):
            with patch('map_publisher.main_cli.log_info'):
                with patch('map_publisher.main_cli.log_error'):
                    yield


@pytest.fixture
def publisher_env(monkeypatch):
    monkeypatch.setenv("PUBLISHER_URL", "https://gallery.example.org/api/")
    monkeypatch.setenv("PUBLISHER_USERNAME", "orienteer")
    monkeypatch.setenv("PUBLISHER_PASSWORD", "secret")
    yield monkeypatch


@pytest.fixture
def mock_publisher():
    with patch('map_publisher.main_cli.RestApiPublisher') as publisher_class:
        yield publisher_class.return_value


class TestBuildMapInfo:

    def test_reads_images_and_metadata(self, tmp_path):
        image = tmp_path / "sprint.PNG"
        image.write_bytes(b"map-bytes")
        blank = tmp_path / "blank.png"
        blank.write_bytes(b"blank-bytes")

        args = parse_arguments([
            'publish', '--image', str(image), '--blank-image', str(blank),
            '--name', 'Club sprint', '--category-id', '4', '--date', '2024-05-01',
        ])
        map_info = build_map_info(args)

        assert map_info.map_image_data == b"map-bytes"
        assert map_info.blank_map_image_data == b"blank-bytes"
        assert map_info.map_image_file_extension == "png"
        assert map_info.name == "Club sprint"
        assert map_info.category_id == 4
        assert map_info.date == datetime(2024, 5, 1)


class TestMain:

    def test_publish_success(self, tmp_path, publisher_env, mock_publisher, capsys):
        image = tmp_path / "map.jpg"
        image.write_bytes(b"jpeg")
        mock_publisher.publish.return_value = PublishOutcome(
            success=True, url="https://gallery.example.org/maps/1"
        )

        code = main(['publish', '--image', str(image)])

        assert code == EXIT_OK
        published = mock_publisher.publish.call_args[0][0]
        assert isinstance(published, MapInfo)
        assert published.map_image_file_extension == "jpg"
        assert "https://gallery.example.org/maps/1" in capsys.readouterr().out

    def test_publish_failure(self, tmp_path, publisher_env, mock_publisher, capsys):
        image = tmp_path / "map.jpg"
        image.write_bytes(b"jpeg")
        mock_publisher.publish.return_value = PublishOutcome(
            success=False, error_message="Authentication error"
        )

        code = main(['publish', '--image', str(image)])

        assert code == EXIT_FAILURE
        assert "Authentication error" in capsys.readouterr().out

    def test_missing_image_file(self, tmp_path, publisher_env, mock_publisher):
        code = main(['publish', '--image', str(tmp_path / "missing.png")])

        assert code == EXIT_FAILURE
        mock_publisher.publish.assert_not_called()

    def test_categories(self, publisher_env, mock_publisher, capsys):
        mock_publisher.get_all_categories.return_value = GetAllCategoriesResult(
            success=True, categories=[Category(id=1, name="Training")]
        )

        code = main(['categories'])

        assert code == EXIT_OK
        assert "1\tTraining" in capsys.readouterr().out

    def test_missing_configuration(self, monkeypatch, mock_publisher, capsys):
        for key in ("PUBLISHER_URL", "PUBLISHER_USERNAME", "PUBLISHER_PASSWORD"):
            monkeypatch.delenv(key, raising=False)

        code = main(['maps'])

        assert code == EXIT_CONFIG_ERROR
        assert "Configuration Error" in capsys.readouterr().out
        mock_publisher.get_all_maps.assert_not_called()
