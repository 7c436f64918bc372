"""
Test del flusso CLI: caricamento prodotti, dry-run e salvataggio (generazione mockata)
"""
import io
import json
import os
import tempfile
import unittest
from contextlib import redirect_stdout
from unittest.mock import MagicMock, patch

import yaml

from slideshow_generator import cli
from slideshow_generator.config import Settings
from slideshow_generator.core import format_file_size, format_seconds
from slideshow_generator.models import CatalogItem, GeneratedVideo, SlideTexts, VideoConfig
from slideshow_generator.services.errors import GenerationCancelled, PreconditionError

ITEMS = [
    {'id': 'a', 'title': 'Lace Set', 'price': 200, 'discount': 20, 'category': 'sets'},
    {'id': 'b', 'title': 'Silk Robe', 'price': 80, 'category': 'night'},
    {'id': 'c', 'title': 'Cotton Brief', 'price': 15, 'category': 'basics', 'active': False},
]


class TestCliHelpers(unittest.TestCase):
    """Test per funzioni pure"""

    def test_format_seconds(self):
        self.assertEqual(format_seconds(0), "00:00:00.000")
        self.assertEqual(format_seconds(14.5), "00:00:14.500")
        self.assertEqual(format_seconds(3661.007), "01:01:01.007")
        self.assertEqual(format_seconds(59.9996), "00:01:00.000")
        self.assertEqual(format_seconds(-0.1), "-00:00:00.100")

    def test_format_file_size(self):
        self.assertEqual(format_file_size(0), "0 Bytes")
        self.assertEqual(format_file_size(512), "512 Bytes")
        self.assertEqual(format_file_size(1536), "1.5 KB")
        self.assertEqual(format_file_size(5 * 1024 * 1024), "5 MB")


class TestLoadItemsFile(unittest.TestCase):
    def _write(self, suffix, text):
        with tempfile.NamedTemporaryFile('w', suffix=suffix, delete=False, encoding='utf-8') as f:
            f.write(text)
            path = f.name
        self.addCleanup(os.unlink, path)
        return path

    def test_yaml_list(self):
        items = cli.load_items_file(self._write('.yaml', yaml.safe_dump(ITEMS)))
        self.assertEqual([i.id for i in items], ['a', 'b', 'c'])
        self.assertFalse(items[2].active)

    def test_json_rest_payload(self):
        path = self._write('.json', json.dumps({'status': 'success', 'payload': ITEMS}))
        self.assertEqual(len(cli.load_items_file(path)), 3)

    def test_unexpected_format(self):
        with self.assertRaises(ValueError):
            cli.load_items_file(self._write('.yaml', 'just a string'))


class TestCliFlow(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.items_path = os.path.join(self.tmp.name, 'items.yaml')
        with open(self.items_path, 'w', encoding='utf-8') as f:
            yaml.safe_dump(ITEMS, f)

    def _main(self, *argv):
        buf = io.StringIO()
        with patch('sys.argv', ['slideshow-generator', *argv]), \
                patch('os.getcwd', return_value=self.tmp.name), redirect_stdout(buf):
            code = cli.main()
        return code, buf.getvalue()

    def test_dry_run_prints_selection_and_duration(self):
        code, out = self._main('--items-file', self.items_path, '--dry-run', '--max-products', '3',
                               '--duration', '3')
        self.assertEqual(code, 0)
        self.assertIn('Selected products (2 of 3)', out)
        self.assertIn('$160.00 (was $200.00, -20%)', out)
        self.assertIn('Nominal duration: 11.5s', out)

    def test_dry_run_with_empty_selection(self):
        code, out = self._main('--items-file', self.items_path, '--dry-run', '--max-products', '3',
                               '--selection', 'by-category', '--category', 'missing')
        self.assertEqual(code, 0)
        self.assertIn('No products available', out)

    def test_missing_source_returns_usage_error(self):
        code, out = self._main('--dry-run')
        self.assertEqual(code, 2)
        self.assertIn('--items-file', out)

    def test_invalid_option_is_a_configuration_error(self):
        code, out = self._main('--items-file', self.items_path, '--max-products', '40')
        self.assertEqual(code, 2)
        self.assertIn('Configuration error', out)

    def test_entrance_longer_than_shortest_duration_is_a_configuration_error(self):
        with open(os.path.join(self.tmp.name, 'config.yml'), 'w', encoding='utf-8') as f:
            yaml.safe_dump({'canvas': {'fps': 30}}, f)
        with patch('slideshow_generator.cli.run_generation') as run:
            code, out = self._main('--items-file', self.items_path, '--max-products', '3')
        self.assertEqual(code, 2)
        self.assertIn('Configuration error', out)
        run.assert_not_called()

    def test_generation_errors_map_to_exit_codes(self):
        with patch('slideshow_generator.cli.run_generation', side_effect=PreconditionError("No products")):
            code, out = self._main('--items-file', self.items_path, '--max-products', '3')
        self.assertEqual(code, 1)
        self.assertIn('No products', out)
        with patch('slideshow_generator.cli.run_generation', side_effect=GenerationCancelled("stop")):
            code, _ = self._main('--items-file', self.items_path, '--max-products', '3')
        self.assertEqual(code, 130)

    def test_config_file_in_working_directory_is_used(self):
        with open(os.path.join(self.tmp.name, 'config.yml'), 'w', encoding='utf-8') as f:
            yaml.safe_dump({'items_file': self.items_path, 'dry_run': True,
                            'video': {'max_products': 3, 'selection': 'discounted'}}, f)
        code, out = self._main()
        self.assertEqual(code, 0)
        self.assertIn('Selected products (1 of 3)', out)

    def test_run_generation_saves_the_video(self):
        items = [CatalogItem.from_dict(entry) for entry in ITEMS[:2]]
        config = VideoConfig(max_products=3, product_duration=3)
        video = GeneratedVideo(data=b'video', mime_type='video/mp4;codecs=h264', id='slideshow_7',
                               items=tuple(items), config=config, duration_seconds=11.5)

        def fake_generate(items, video_config, texts, on_progress=None, cancel=None):
            on_progress(100, "Video generated successfully!")
            return video

        generator = MagicMock()
        generator.generate.side_effect = fake_generate
        buf = io.StringIO()
        with redirect_stdout(buf):
            path = cli.run_generation(generator, items, config, SlideTexts(), self.tmp.name)

        self.assertEqual(path, os.path.join(self.tmp.name, 'slideshow_7.mp4'))
        with open(path, 'rb') as f:
            self.assertEqual(f.read(), b'video')
        self.assertIn('[100%] Video generated successfully!', buf.getvalue())
        self.assertIn('Products: 2', buf.getvalue())

    def test_print_selection_uses_settings_timing(self):
        items = [CatalogItem.from_dict(entry) for entry in ITEMS]
        buf = io.StringIO()
        with redirect_stdout(buf):
            cli.print_selection(items, VideoConfig(max_products=3, product_duration=2),
                                Settings(intro_seconds=1, outro_seconds=1))
        self.assertIn('Nominal duration: 6s', buf.getvalue())


if __name__ == '__main__':
    unittest.main()
