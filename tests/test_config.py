"""
Test per il modulo di configurazione
"""
import os
import tempfile
import unittest

import yaml

from slideshow_generator.config import Config, Palette, Settings
from slideshow_generator.encoding.codecs import DEFAULT_PREFERENCES


class TestConfig(unittest.TestCase):
    """Test per la classe Config"""

    def _write_yaml(self, content):
        with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
            if isinstance(content, str):
                f.write(content)
            else:
                yaml.safe_dump(content, f)
            path = f.name
        self.addCleanup(os.unlink, path)
        return path

    def test_default_configuration(self):
        """Test che i valori di default siano correttamente impostati"""
        config = Config()

        self.assertIsNone(config.get('api_url'))
        self.assertEqual(config.get('output_dir'), './output')
        self.assertEqual(config.get('pacing'), 'offline')
        self.assertEqual(config.get('canvas')['fps'], 60)
        self.assertEqual(config.video_config().max_products, 8)
        self.assertEqual(config.texts().brand_name, 'Joly Lingerie')

    def test_get_with_default_value(self):
        config = Config()
        self.assertEqual(config.get('non_existent_key', 'default_value'), 'default_value')
        self.assertIsNone(config.get('non_existent_key'))

    def test_load_from_partial_yaml_file(self):
        """Test caricamento configurazione parziale: le sezioni annidate vengono fuse"""
        path = self._write_yaml({
            'api_url': 'http://localhost:8080/api',
            'canvas': {'fps': 30},
            'video': {'animation': 'slide'},
        })
        config = Config(config_file=path)

        self.assertEqual(config.get('api_url'), 'http://localhost:8080/api')
        self.assertEqual(config.get('canvas')['fps'], 30)
        # width/height restano quelli di default
        self.assertEqual(config.get('canvas')['width'], 1080)
        self.assertEqual(config.video_config().animation, 'slide')
        self.assertEqual(config.video_config().max_products, 8)

    def test_load_from_nonexistent_file(self):
        """Un file inesistente non solleva eccezioni"""
        config = Config(config_file='/path/to/nonexistent/file.yaml')
        self.assertEqual(config.get('output_dir'), './output')

    def test_load_from_invalid_yaml_file(self):
        path = self._write_yaml("invalid: yaml: content: [")
        with self.assertRaises(ValueError) as context:
            Config(config_file=path)
        self.assertIn("Error loading configuration file", str(context.exception))

    def test_non_mapping_yaml_is_rejected(self):
        path = self._write_yaml("- a\n- b\n")
        with self.assertRaises(ValueError):
            Config(config_file=path)

    def test_load_from_empty_yaml_file(self):
        path = self._write_yaml("")
        config = Config(config_file=path)
        self.assertEqual(config.get('output_dir'), './output')

    def test_update_from_args_with_none_values(self):
        """Test che valori None da CLI non sovrascrivano la configurazione"""
        path = self._write_yaml({'api_url': 'http://file/api', 'video': {'max_products': 5}})
        config = Config(config_file=path)
        config.update_from_args({
            'api_url': None,
            'output_dir': './cli_output',
            'video.max_products': None,
            'video.animation': 'rotate',
        })

        self.assertEqual(config.get('api_url'), 'http://file/api')
        self.assertEqual(config.get('output_dir'), './cli_output')
        self.assertEqual(config.video_config().max_products, 5)
        self.assertEqual(config.video_config().animation, 'rotate')

    def test_unknown_keys_are_preserved(self):
        path = self._write_yaml({'unknown_key': 123})
        self.assertEqual(Config(path).get('unknown_key'), 123)

    def test_config_immutability_via_get_all(self):
        """Test che get_all restituisca una copia"""
        config = Config()
        config_copy = config.get_all()
        config_copy['api_url'] = 'http://modified'
        self.assertIsNone(config.get('api_url'))

    def test_instances_do_not_share_defaults(self):
        first = Config()
        first.update_from_args({'canvas.fps': 24})
        self.assertEqual(Config().get('canvas')['fps'], 60)


class TestSettings(unittest.TestCase):
    def test_defaults(self):
        settings = Settings.from_config(Config())
        self.assertEqual((settings.width, settings.height, settings.fps), (1080, 1920, 60))
        self.assertEqual(settings.entrance_frames, 90)
        self.assertAlmostEqual(settings.entrance_seconds, 1.5)
        self.assertEqual(settings.codecs, DEFAULT_PREFERENCES)
        self.assertEqual(settings.palette, Palette())
        self.assertIsNone(settings.base_url)

    def test_base_url_falls_back_to_api_url(self):
        config = Config()
        config.update_from_args({'api_url': 'http://api'})
        self.assertEqual(Settings.from_config(config).base_url, 'http://api')
        config.update_from_args({'base_url': 'http://cdn'})
        self.assertEqual(Settings.from_config(config).base_url, 'http://cdn')

    def test_palette_overrides(self):
        palette = Palette.from_dict({'accent': [1, 2, 3, 255]})
        self.assertEqual(palette.accent, (1, 2, 3))
        self.assertEqual(palette.background, (245, 242, 237))

    def test_invalid_values_raise(self):
        with self.assertRaises(ValueError):
            Settings(fps=0)
        with self.assertRaises(ValueError):
            Settings(pacing='turbo')
        with self.assertRaises(ValueError):
            Settings(fps=30, entrance_frames=90)
        self.assertEqual(Settings(fps=30, entrance_frames=60).entrance_seconds, 2)
        config = Config()
        config.update_from_args({'video.max_products': 50})
        with self.assertRaises(ValueError):
            config.video_config()


if __name__ == "__main__":
    unittest.main()
