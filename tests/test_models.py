"""
Tests for the domain types
"""
import os
import unittest
from decimal import Decimal

from slideshow_generator.models import (
    CatalogItem,
    GeneratedVideo,
    GenerationSession,
    SlideTexts,
    VideoConfig,
)


class TestCatalogItem(unittest.TestCase):
    def test_rejects_negative_price_and_out_of_range_discount(self):
        with self.assertRaises(ValueError):
            CatalogItem(id='1', title='x', price=-1)
        with self.assertRaises(ValueError):
            CatalogItem(id='1', title='x', price=10, discount=120)

    def test_from_rest_payload(self):
        item = CatalogItem.from_dict({
            '_id': 'abc',
            'title': 'Lace Set',
            'price': 59.9,
            'discount': 15,
            'thumbnails': ['/uploads/lace.jpg', '/uploads/other.jpg'],
            'category': 'sets',
            'status': False,
        })
        self.assertEqual(item.id, 'abc')
        self.assertEqual(item.price, Decimal('59.9'))
        self.assertEqual(item.image_ref, '/uploads/lace.jpg')
        self.assertFalse(item.active)
        self.assertTrue(item.has_discount)

    def test_from_flat_dict_without_image(self):
        item = CatalogItem.from_dict({'id': 7, 'title': 'Robe', 'price': '30'})
        self.assertEqual(item.id, '7')
        self.assertEqual(item.image_ref, '')
        self.assertIsNone(item.discount)
        self.assertTrue(item.active)

    def test_discount_rounding(self):
        item = CatalogItem(id='1', title='x', price=Decimal('19.99'), discount=33)
        self.assertEqual(item.discounted_price, Decimal('13.39'))
        self.assertEqual(item.saved_amount, Decimal('6.60'))

    def test_zero_discount_is_not_a_discount(self):
        item = CatalogItem(id='1', title='x', price=100, discount=0)
        self.assertFalse(item.has_discount)
        self.assertEqual(item.discounted_price, Decimal(100))


class TestVideoConfig(unittest.TestCase):
    def test_bounds_are_enforced(self):
        with self.assertRaises(ValueError):
            VideoConfig(max_products=2)
        with self.assertRaises(ValueError):
            VideoConfig(max_products=13)
        with self.assertRaises(ValueError):
            VideoConfig(product_duration=1)
        with self.assertRaises(ValueError):
            VideoConfig(product_duration=7)
        with self.assertRaises(ValueError):
            VideoConfig(animation='spin')
        with self.assertRaises(ValueError):
            VideoConfig(selection='featured')

    def test_from_dict_accepts_form_aliases_and_ignores_unknown_keys(self):
        cfg = VideoConfig.from_dict({'selection': 'discount', 'max_products': '5', 'extra': 1,
                                     'category': None, 'animation': 'slide'})
        self.assertEqual(cfg.selection, 'discounted')
        self.assertEqual(cfg.max_products, 5)
        self.assertEqual(cfg.animation, 'slide')

    def test_texts_defaults(self):
        texts = SlideTexts.from_dict({'brand_name': 'Acme', 'unknown': 'x'})
        self.assertEqual(texts.brand_name, 'Acme')
        self.assertTrue(texts.outro_message)


class TestGenerationSession(unittest.TestCase):
    def test_progress_never_decreases(self):
        session = GenerationSession()
        session.report(40, "a")
        session.report(20, "b")
        self.assertEqual(session.percent, 40)
        self.assertEqual(session.message, "b")
        session.report(150, "c")
        self.assertEqual(session.percent, 100)


class TestGeneratedVideo(unittest.TestCase):
    def _video(self, mime='video/webm;codecs=vp9'):
        return GeneratedVideo(data=b'abc', mime_type=mime, id='slideshow_1', items=(),
                              config=VideoConfig(), duration_seconds=10)

    def test_size_and_extension(self):
        self.assertEqual(self._video().byte_size, 3)
        self.assertEqual(self._video().extension, 'webm')
        self.assertEqual(self._video('video/mp4;codecs=h264').extension, 'mp4')

    def test_preview_file_is_removed_on_exit_and_on_error(self):
        video = self._video()
        with video.preview_file() as path:
            with open(path, 'rb') as f:
                self.assertEqual(f.read(), b'abc')
            self.assertTrue(path.endswith('.webm'))
        self.assertFalse(os.path.exists(path))

        with self.assertRaises(RuntimeError):
            with video.preview_file() as path:
                raise RuntimeError("boom")
        self.assertFalse(os.path.exists(path))


if __name__ == "__main__":
    unittest.main()
