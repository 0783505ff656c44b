"""
Map Gallery Publisher - command line entry point

Usage:
    python -m map_publisher publish --image map.png [options]
    python -m map_publisher categories
    python -m map_publisher maps

Options:
    --env-file PATH     Configuration file (default: .env)
    --log-level LEVEL   Logging level (default: INFO)
    --log-file PATH     Log file (default: logs/publisher.log)
"""

import argparse
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from .config.config_module import ConfigError, REQUIRED_PUBLISHER_KEYS, load_config, validate_config
from .config.logger_module import initialize_logger, log_error, log_info
from .publishing.publisher_client import RestApiPublisher
from .publishing.publisher_models import MapInfo


EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG_ERROR = 2


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="map_publisher",
        description="Map Gallery Publisher - publish maps to a hosted gallery",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s publish --image map.png --name "Club night sprint" --category-id 2
  %(prog)s publish --image map.jpg --blank-image blank.jpg --date 2024-05-01
  %(prog)s categories --log-level DEBUG
        """
    )

    parser.add_argument('--env-file', type=str, default='.env',
                        help='Configuration file (default: .env)')

    parser.add_argument('--log-level',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        default='INFO',
                        help='Logging level (default: INFO)')

    parser.add_argument('--log-file', type=str, default='logs/publisher.log',
                        help='Log file (default: logs/publisher.log)')

    commands = parser.add_subparsers(dest='command', required=True)

    publish = commands.add_parser('publish', help='Publish a map')
    publish.add_argument('--image', required=True, help='Map image file')
    publish.add_argument('--blank-image', help='Blank map image file')
    publish.add_argument('--name', help='Event name')
    publish.add_argument('--map-name', help='Map name')
    publish.add_argument('--category-id', type=int, help='Gallery category id')
    publish.add_argument('--date', type=datetime.fromisoformat,
                         help='Event date, YYYY-MM-DD')
    publish.add_argument('--organiser', help='Organising club')
    publish.add_argument('--country', help='Country')
    publish.add_argument('--discipline', help='Discipline')
    publish.add_argument('--relay-leg', help='Relay leg')
    publish.add_argument('--result-list-url', help='Link to the results')
    publish.add_argument('--comment', help='Free text comment')

    commands.add_parser('categories', help='List gallery categories')
    commands.add_parser('maps', help='List published maps')

    return parser.parse_args(argv)


def build_map_info(args: argparse.Namespace) -> MapInfo:
    """
    Read the image files named on the command line into a MapInfo.

    Raises:
        OSError: If an image file cannot be read
    """
    image_path = Path(args.image)
    blank_image_data = None
    if args.blank_image:
        blank_image_data = Path(args.blank_image).read_bytes()

    return MapInfo(
        name=args.name,
        map_name=args.map_name,
        category_id=args.category_id,
        date=args.date,
        organiser=args.organiser,
        country=args.country,
        discipline=args.discipline,
        relay_leg=args.relay_leg,
        result_list_url=args.result_list_url,
        comment=args.comment,
        map_image_file_extension=image_path.suffix.lstrip('.').lower() or None,
        map_image_data=image_path.read_bytes(),
        blank_map_image_data=blank_image_data,
    )


def run_publish(publisher: RestApiPublisher, args: argparse.Namespace) -> int:
    try:
        map_info = build_map_info(args)
    except OSError as e:
        log_error(f"Cannot read map image: {e}")
        print(f"\n❌ Cannot read map image: {e}")
        return EXIT_FAILURE

    outcome = publisher.publish(map_info)

    if outcome.success:
        print(f"\n✅ Published: {outcome.url}")
        return EXIT_OK

    print(f"\n❌ Publishing failed: {outcome.error_message}")
    return EXIT_FAILURE


def run_categories(publisher: RestApiPublisher) -> int:
    result = publisher.get_all_categories()
    if not result.success:
        print(f"\n❌ Could not list categories: {result.error_message or 'unknown error'}")
        return EXIT_FAILURE

    for category in result.categories:
        print(f"{category.id}\t{category.name}")
    return EXIT_OK


def run_maps(publisher: RestApiPublisher) -> int:
    result = publisher.get_all_maps()
    if not result.success:
        print(f"\n❌ Could not list maps: {result.error_message or 'unknown error'}")
        return EXIT_FAILURE

    for map_info in result.maps:
        date = map_info.date.date().isoformat() if map_info.date else ""
        print(f"{map_info.id}\t{date}\t{map_info.name or ''}\t{map_info.map_name or ''}")
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the map publisher."""
    args = parse_arguments(argv)

    initialize_logger(log_level=args.log_level, log_file=args.log_file)
    load_config(args.env_file)

    try:
        validate_config(REQUIRED_PUBLISHER_KEYS)
        publisher = RestApiPublisher()
    except (ConfigError, ValueError) as e:
        print(f"\n❌ Configuration Error: {e}")
        print("\nPlease ensure the following environment variables are set:")
        for key in REQUIRED_PUBLISHER_KEYS:
            print(f"  - {key}")
        print("\nYou can set them in a .env file or as environment variables.")
        return EXIT_CONFIG_ERROR

    log_info(f"Running '{args.command}' against {publisher.web_service_url}")

    if args.command == 'publish':
        return run_publish(publisher, args)
    if args.command == 'categories':
        return run_categories(publisher)
    return run_maps(publisher)
