"""
Unit tests for the gradation pictures and the picture registry.
Run from project root: python -m pytest tests/ -v
"""
import tempfile
import unittest
from pathlib import Path
from unittest import mock

import numpy as np
from PIL import Image

from wallpaper_errors import GeneratorArgumentError, ImageLoadError, UnknownGeneratorError
from gradations import REGISTRY, ImageProjection, LinearGradient, MandelbrotField


class TestRegistry(unittest.TestCase):

    def test_names(self):
        self.assertEqual(REGISTRY.names(), ["gradient", "graphic", "mandelbrot"])

    def test_create(self):
        self.assertIsInstance(REGISTRY.create("gradient", 10, 5), LinearGradient)
        self.assertIsInstance(REGISTRY.create("mandelbrot", 10, 5, ["-i", "7"]), MandelbrotField)

    def test_unknown(self):
        with self.assertRaises(UnknownGeneratorError) as cm:
            REGISTRY.create("spiral", 10, 10)
        self.assertIn("spiral", str(cm.exception))

    def test_names_are_case_sensitive(self):
        for name in ("Mandelbrot", "GRADIENT"):
            with self.assertRaises(UnknownGeneratorError):
                REGISTRY.get(name)


class TestLinearGradient(unittest.TestCase):

    def test_edges(self):
        for w in (1, 2, 7, 1366):
            f = REGISTRY.create("gradient", w, 3, ["ignored"])
            for y in range(3):
                self.assertEqual(f(0, y), 0.0)
                self.assertAlmostEqual(f(w - 1, y), (w - 1) / w)

    def test_bad_canvas(self):
        with self.assertRaises(GeneratorArgumentError):
            LinearGradient(0, 10)


class TestMandelbrotField(unittest.TestCase):

    def test_center_never_escapes(self):
        for w, h in ((100, 60), (61, 61), (3, 400)):
            f = MandelbrotField.from_args(w, h, [])
            self.assertEqual(f(w // 2, h // 2), 1.0)

    def test_far_point_escapes_quickly(self):
        f = MandelbrotField.from_args(100, 100, [])
        self.assertEqual(f.r, 50)
        # (0, 0) maps to c = -2-2j, |c| > 2 after one step
        self.assertLessEqual(f(0, 0), 2 / 50)
        self.assertGreater(f(0, 0), 0.0)

    def test_iterations_argument(self):
        f = MandelbrotField.from_args(100, 100, ["-i", "10"])
        self.assertEqual(f.iterations, 10)
        self.assertEqual(f(0, 0), 0.1)
        self.assertEqual(MandelbrotField.from_args(100, 100, ["--iterations", "3"]).iterations, 3)

    def test_range(self):
        f = MandelbrotField.from_args(40, 30, ["-i", "20"])
        values = [f(x, y) for y in range(30) for x in range(40)]
        self.assertTrue(all(0.0 <= v <= 1.0 for v in values))

    def test_bad_arguments(self):
        for args in (["-i", "many"], ["-i", "0"], ["-i"], ["--zoom", "2"], ["extra"]):
            with self.subTest(args=args):
                with self.assertRaises(GeneratorArgumentError) as cm:
                    MandelbrotField.from_args(10, 10, args)
                self.assertIn("usage", cm.exception.usage)
                self.assertNotIn("\n", str(cm.exception))

    def test_tiny_canvas_defined(self):
        f = MandelbrotField.from_args(1, 1, [])
        self.assertEqual(f(0, 0), 1.0)


class TestImageProjection(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def _save(self, name, arr, mode="L"):
        path = self.tmp / name
        Image.fromarray(arr, mode).save(path)
        return str(path)

    def test_projects_grayscale(self):
        arr = np.array([[0, 255], [51, 102]], dtype=np.uint8)
        path = self._save("src.png", arr)
        f = ImageProjection.from_args(4, 4, [path])
        self.assertEqual(f.scale, 2.0)
        self.assertEqual(f(0, 0), 0.0)
        self.assertEqual(f(3, 0), 1.0)
        self.assertAlmostEqual(f(1, 3), 0.2)
        self.assertAlmostEqual(f(2, 2), 0.4)

    def test_aspect_preserved_and_clamped(self):
        # 2x1 source onto a 2x4 canvas: scale = max(1, 4) = 4
        arr = np.array([[10, 200]], dtype=np.uint8)
        f = ImageProjection.from_args(2, 4, [self._save("wide.png", arr)])
        self.assertEqual(f.scale, 4.0)
        for y in range(4):
            for x in range(2):
                self.assertAlmostEqual(f(x, y), 10 / 255)
        # sampling past the source edge takes the edge pixel
        self.assertAlmostEqual(f(100, 100), 200 / 255)

    def test_color_with_alpha_converted(self):
        rgba = np.zeros((3, 3, 4), dtype=np.uint8)
        rgba[..., 0] = 255
        rgba[..., 3] = 128
        path = self._save("rgba.png", rgba, "RGBA")
        f = ImageProjection.from_args(3, 3, [path])
        expected = np.asarray(Image.new("RGB", (1, 1), (255, 0, 0)).convert("L"))[0, 0] / 255
        self.assertAlmostEqual(f(1, 1), expected)

    def test_jpeg_and_file_url(self):
        arr = np.full((8, 8), 128, dtype=np.uint8)
        path = self.tmp / "flat.jpg"
        Image.fromarray(arr, "L").save(path, format="JPEG")
        f = ImageProjection.from_args(4, 4, [path.as_uri()])
        self.assertAlmostEqual(f(2, 2), 128 / 255, delta=3 / 255)

    def test_missing_file(self):
        with self.assertRaises(ImageLoadError):
            ImageProjection.from_args(4, 4, [str(self.tmp / "nope.png")])

    def test_corrupt_file(self):
        path = self.tmp / "bad.png"
        path.write_bytes(b"definitely not a png")
        with self.assertRaises(ImageLoadError):
            ImageProjection.from_args(4, 4, [str(path)])

    def test_oversized_image(self):
        path = self._save("big.png", np.zeros((2, 2), dtype=np.uint8))
        with mock.patch.object(Image, "MAX_IMAGE_PIXELS", 0):
            with self.assertRaises(ImageLoadError):
                ImageProjection.from_args(4, 4, [path])

    def test_requires_one_path(self):
        for args in ([], ["a.png", "b.png"]):
            with self.assertRaises(GeneratorArgumentError):
                ImageProjection.from_args(4, 4, args)


if __name__ == "__main__":
    unittest.main()
