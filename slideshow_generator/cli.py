"""
Command-line interface for the slideshow generator
"""
import argparse
import logging
import os
import threading
from typing import List, Optional

import yaml

from .config import Config, Settings
from .core import filter_items, format_file_size, format_price, format_seconds
from .generator import SlideshowGenerator
from .models import CatalogItem, VideoConfig
from .scheduler import CancellationToken, nominal_duration
from .services.catalog import CatalogClient
from .services.errors import CatalogError, GenerationCancelled, SlideshowError
from .services.export import save_video


logger = logging.getLogger(__name__)


def load_items_file(path: str) -> List[CatalogItem]:
    """Load catalog items from a YAML or JSON file.

    Accepts a bare list or the REST response shape ``{"payload": [...]}``.
    """
    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f)
    if isinstance(data, dict):
        data = data.get('payload') or data.get('items') or []
    if not isinstance(data, list):
        raise ValueError(f"Unexpected items file format: {path}")
    return [CatalogItem.from_dict(entry) for entry in data]


def print_selection(items: List[CatalogItem], video_config: VideoConfig, settings: Settings) -> None:
    """Dry-run output: the selected products and the nominal video length."""
    selected = filter_items(items, video_config)
    print(f"\nSelected products ({len(selected)} of {len(items)}):")
    if not selected:
        print("No products available with the selected filters.")
        return
    for i, item in enumerate(selected, 1):
        if item.has_discount:
            price = f"{format_price(item.discounted_price)} (was {format_price(item.price)}, -{item.discount:g}%)"
        else:
            price = format_price(item.price)
        print(f"  {i}. {item.title} - {price} [{item.category or 'no category'}]")
    duration = nominal_duration(len(selected), video_config.product_duration,
                                settings.intro_seconds, settings.outro_seconds)
    print(f"\nAnimation: {video_config.animation}, {video_config.product_duration:g}s per product")
    print(f"Nominal duration: {duration:g}s ({format_seconds(duration)})")


def run_generation(generator: SlideshowGenerator, items, video_config, texts, output_dir: str) -> Optional[str]:
    """Generate in a worker thread so Ctrl-C can cancel the run cooperatively."""
    cancel = CancellationToken()
    result = {}

    def on_progress(percent, message):
        print(f"[{percent:3d}%] {message}")

    def worker():
        try:
            result['video'] = generator.generate(items, video_config, texts, on_progress=on_progress, cancel=cancel)
        except BaseException as e:  # re-raised in the main thread
            result['error'] = e

    thread = threading.Thread(target=worker, name="slideshow-generator", daemon=True)
    thread.start()
    try:
        while thread.is_alive():
            thread.join(0.2)
    except KeyboardInterrupt:
        print("\nCancelling...")
        cancel.cancel()
        thread.join()

    if 'error' in result:
        raise result['error']
    video = result['video']
    path = save_video(video, output_dir)
    print(f"\n{'='*60}")
    print(f"Video generated: {path}")
    print(f"Format: {video.mime_type}")
    print(f"Duration: {video.duration_seconds:g}s, size: {format_file_size(video.byte_size)}")
    print(f"Products: {len(video.items)}")
    print(f"{'='*60}")
    return path


def main():
    """Main CLI entry point"""
    # Minimal logging setup; services use logging for diagnostics.
    logging.basicConfig(level=logging.INFO)
    parser = argparse.ArgumentParser(description='Product slideshow video generator')
    parser.add_argument('--config', type=str, help='Path to the YAML configuration file')
    parser.add_argument('--api-url', type=str, help='Base URL of the catalog REST API')
    parser.add_argument('--items-file', type=str, help='YAML/JSON file with catalog items (used instead of the API)')
    parser.add_argument('--output-dir', type=str, help='Output directory for generated videos')
    parser.add_argument('--selection', choices=['all', 'by-category', 'discounted'], help='Which products to include')
    parser.add_argument('--category', type=str, help="Category filter for --selection by-category")
    parser.add_argument('--max-products', type=int, help='Maximum number of products (3-12)')
    parser.add_argument('--duration', type=float, help='Seconds per product (2-6)')
    parser.add_argument('--animation', choices=['fade', 'zoom', 'slide', 'rotate'], help='Entrance animation')
    parser.add_argument('--pacing', choices=['offline', 'realtime'], help='Render as fast as possible or paced to the wall clock')
    parser.add_argument('--dry-run', action='store_true', help='Print the selected products and duration without generating')

    name_group = parser.add_mutually_exclusive_group()
    name_group.add_argument('--show-name', dest='show_name', action='store_true', help='Show product names')
    name_group.add_argument('--no-name', dest='show_name', action='store_false', help='Hide product names')
    price_group = parser.add_mutually_exclusive_group()
    price_group.add_argument('--show-price', dest='show_price', action='store_true', help='Show product prices')
    price_group.add_argument('--no-price', dest='show_price', action='store_false', help='Hide product prices')
    parser.set_defaults(show_name=None, show_price=None)

    args = parser.parse_args()

    # Without --config, look for config.yml / config.yaml in the current directory
    default_config_path = None
    if not args.config:
        cwd = os.getcwd()
        for candidate in (os.path.join(cwd, 'config.yml'), os.path.join(cwd, 'config.yaml')):
            if os.path.exists(candidate):
                default_config_path = candidate
                break
    config = Config(config_file=args.config or default_config_path)

    # CLI arguments take precedence
    config.update_from_args({
        'api_url': args.api_url,
        'items_file': args.items_file,
        'output_dir': args.output_dir,
        'pacing': args.pacing,
        'dry_run': args.dry_run or None,
        'video.selection': args.selection,
        'video.category': args.category,
        'video.max_products': args.max_products,
        'video.product_duration': args.duration,
        'video.animation': args.animation,
        'video.show_name': args.show_name,
        'video.show_price': args.show_price,
    })

    try:
        settings = Settings.from_config(config)
        video_config = config.video_config()
        texts = config.texts()
    except ValueError as e:
        print(f"Configuration error: {e}")
        return 2

    api_url = config.get('api_url')
    items_file = config.get('items_file')
    client = CatalogClient(api_url) if api_url else None

    try:
        if items_file:
            items = load_items_file(items_file)
        elif client is not None:
            print("\nLoading products from the catalog...")
            items = client.get_products(limit=100, status=True)
        else:
            print("Specify --items-file or --api-url (or set them in the configuration file).")
            return 2
    except (OSError, ValueError, CatalogError) as e:
        print(f"Error loading products: {e}")
        return 1

    if config.get('dry_run'):
        print_selection(items, video_config, settings)
        return 0

    generator = SlideshowGenerator(
        settings,
        connectivity_probe=client.health_check if client is not None and not items_file else None,
    )
    try:
        run_generation(generator, items, video_config, texts, config.get('output_dir'))
    except GenerationCancelled:
        print("Generation cancelled.")
        return 130
    except SlideshowError as e:
        print(f"Error during generation: {e}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
