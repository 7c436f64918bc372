"""
Configuration handling for the slideshow generator
"""
import copy
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

import yaml

from .encoding.codecs import DEFAULT_PREFERENCES
from .models import PRODUCT_DURATION_RANGE, SlideTexts, VideoConfig


class Config:
    """Application configuration: defaults < YAML file < CLI arguments"""

    # Nested sections merged key by key when loading YAML
    NESTED_SECTIONS = ('canvas', 'colors', 'fonts', 'texts', 'video')

    DEFAULT_CONFIG = {
        'api_url': None,
        'base_url': None,
        'items_file': None,
        'output_dir': './output',
        'dry_run': False,
        'pacing': 'offline',          # 'offline' | 'realtime'
        'image_timeout': 10,
        'codecs': list(DEFAULT_PREFERENCES),
        'canvas': {
            'width': 1080,                # story format 9:16
            'height': 1920,
            'fps': 60,
            'entrance_frames': 90,        # 1.5s at 60 fps
            'intro_seconds': 2.5,
            'outro_seconds': 3.0,
        },
        'colors': {
            'background': [245, 242, 237],  # bone white
            'motif': [209, 199, 189],       # floral silhouettes
            'motif_center': [196, 184, 169],
            'title': [44, 44, 44],
            'accent': [122, 92, 74],        # prices, badge, subtitles
            'muted': [153, 153, 153],       # struck price, secondary text
            'badge_text': [255, 255, 255],
        },
        'fonts': {
            'serif': None,              # path to a TrueType font (titles)
            'sans': None,               # path to a TrueType font (prices)
        },
        'texts': {
            'brand_name': 'Joly Lingerie',
            'intro_subtitle': 'Our Collection',
            'intro_description': 'exclusive and elegant products',
            'outro_message': 'Thank you for your preference',
            'outro_call_to_action': 'Visit us in our store',
        },
        'video': {
            'selection': 'all',
            'category': None,
            'max_products': 8,
            'show_name': True,
            'show_price': True,
            'product_duration': 6,
            'animation': 'zoom',
        },
    }

    def __init__(self, config_file: Optional[str] = None):
        """
        Initialise the configuration

        Args:
            config_file: Path to a YAML configuration file (optional)
        """
        # Deep copy so instances never share the defaults
        self.config = copy.deepcopy(self.DEFAULT_CONFIG)

        if config_file and os.path.exists(config_file):
            self.load_from_file(config_file)

    def load_from_file(self, config_file: str) -> None:
        """
        Load configuration from a YAML file

        Args:
            config_file: Path to the configuration file
        """
        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                file_config = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ValueError(f"Error loading configuration file: {e}") from e

        if not file_config:
            return
        if not isinstance(file_config, dict):
            raise ValueError("Error loading configuration file: top level must be a mapping")

        for key, value in file_config.items():
            if key in self.NESTED_SECTIONS and isinstance(value, dict):
                if not isinstance(self.config.get(key), dict):
                    self.config[key] = {}
                self._deep_merge(self.config[key], value)
            else:
                self.config[key] = value

    def _deep_merge(self, base: dict, update: dict) -> None:
        for key, value in update.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._deep_merge(base[key], value)
            else:
                base[key] = value

    def update_from_args(self, args: Dict[str, Any]) -> None:
        """
        Update the configuration with CLI arguments.
        CLI arguments take precedence over the configuration file; ``None``
        values are ignored. Keys of the form ``section.key`` target nested
        sections (e.g. ``video.animation``).
        """
        for key, value in args.items():
            if value is None:
                continue
            if '.' in key:
                section, sub_key = key.split('.', 1)
                if not isinstance(self.config.get(section), dict):
                    self.config[section] = {}
                self.config[section][sub_key] = value
            else:
                self.config[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        return self.config.get(key, default)

    def get_all(self) -> Dict[str, Any]:
        return self.config.copy()

    def video_config(self) -> VideoConfig:
        return VideoConfig.from_dict(self.config.get('video'))

    def texts(self) -> SlideTexts:
        return SlideTexts.from_dict(self.config.get('texts'))


def _color(value, fallback) -> Tuple[int, int, int]:
    if value is None:
        return tuple(fallback)
    return tuple(int(c) for c in value)[:3]


@dataclass(frozen=True)
class Palette:
    background: Tuple[int, int, int] = (245, 242, 237)
    motif: Tuple[int, int, int] = (209, 199, 189)
    motif_center: Tuple[int, int, int] = (196, 184, 169)
    title: Tuple[int, int, int] = (44, 44, 44)
    accent: Tuple[int, int, int] = (122, 92, 74)
    muted: Tuple[int, int, int] = (153, 153, 153)
    badge_text: Tuple[int, int, int] = (255, 255, 255)

    @classmethod
    def from_dict(cls, colors: Optional[Dict[str, Any]]) -> "Palette":
        colors = colors or {}
        defaults = cls()
        return cls(**{name: _color(colors.get(name), getattr(defaults, name))
                      for name in cls.__dataclass_fields__})


@dataclass(frozen=True)
class Settings:
    """Typed engine settings derived from a ``Config``."""

    width: int = 1080
    height: int = 1920
    fps: int = 60
    entrance_frames: int = 90
    intro_seconds: float = 2.5
    outro_seconds: float = 3.0
    pacing: str = 'offline'
    base_url: Optional[str] = None
    image_timeout: float = 10
    codecs: Tuple[str, ...] = DEFAULT_PREFERENCES
    palette: Palette = field(default_factory=Palette)
    serif_font: Optional[str] = None
    sans_font: Optional[str] = None

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError("Canvas size must be positive")
        if self.fps <= 0 or self.entrance_frames <= 0:
            raise ValueError("fps and entrance_frames must be positive")
        if self.pacing not in ('offline', 'realtime'):
            raise ValueError(f"Unknown pacing mode: {self.pacing}")
        shortest = int(round(PRODUCT_DURATION_RANGE[0] * self.fps))
        if self.entrance_frames > shortest:
            raise ValueError(
                f"Entrance animation ({self.entrance_frames} frames at {self.fps} fps) must fit in "
                f"the shortest product duration ({PRODUCT_DURATION_RANGE[0]}s)"
            )

    @property
    def entrance_seconds(self) -> float:
        return self.entrance_frames / self.fps

    @classmethod
    def from_config(cls, config: Config) -> "Settings":
        canvas = config.get('canvas') or {}
        fonts = config.get('fonts') or {}
        defaults = cls()
        return cls(
            width=int(canvas.get('width', defaults.width)),
            height=int(canvas.get('height', defaults.height)),
            fps=int(canvas.get('fps', defaults.fps)),
            entrance_frames=int(canvas.get('entrance_frames', defaults.entrance_frames)),
            intro_seconds=float(canvas.get('intro_seconds', defaults.intro_seconds)),
            outro_seconds=float(canvas.get('outro_seconds', defaults.outro_seconds)),
            pacing=config.get('pacing') or defaults.pacing,
            base_url=config.get('base_url') or config.get('api_url'),
            image_timeout=float(config.get('image_timeout', defaults.image_timeout)),
            codecs=tuple(config.get('codecs') or defaults.codecs),
            palette=Palette.from_dict(config.get('colors')),
            serif_font=fonts.get('serif'),
            sans_font=fonts.get('sans'),
        )
