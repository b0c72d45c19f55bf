"""Tests for bead_pattern.matcher and the colour metric registry."""

import numpy as np
import pytest
from bead_pattern import RawImageBuffer, convert, registry
from bead_pattern.core.palette import DEFAULT_PALETTE, Palette
from bead_pattern.core.types import ColourMetric
from bead_pattern.matcher import PaletteMatcher
from bead_pattern.metrics import cielab

METRICS = ['cielab', 'rgb', 'redmean']


class TestRegistry:
    def test_builtin_metrics_discovered(self):
        assert set(METRICS) <= set(registry.all_metrics())

    def test_get_unknown_lists_available(self):
        with pytest.raises(KeyError, match='cielab'):
            registry.get('ciede2000')

    def test_metric_modules_have_docs(self):
        for name in METRICS:
            assert (registry.load_metric_module(name).__doc__ or '').strip()


class TestMetricDistances:
    def test_rgb_is_squared_euclidean(self):
        m = registry.get('rgb')
        a = m.to_space(np.array([[10, 20, 30]], dtype=np.uint8))
        b = m.to_space(np.array([[13, 24, 30]], dtype=np.uint8))
        assert m.pairwise(a, b)[0, 0] == pytest.approx(25.0)

    def test_redmean_weights(self):
        m = registry.get('redmean')
        a = m.to_space(np.array([[100, 0, 0]], dtype=np.uint8))
        b = m.to_space(np.array([[0, 0, 0]], dtype=np.uint8))
        # r̄ = 50 → (2 + 50/256) * 100²
        assert m.pairwise(a, b)[0, 0] == pytest.approx(21953.125)

    def test_uint8_inputs_do_not_wrap(self):
        m = registry.get('rgb')
        a = m.to_space(np.array([[0, 0, 0]], dtype=np.uint8))
        b = m.to_space(np.array([[200, 200, 200]], dtype=np.uint8))
        assert m.pairwise(a, b)[0, 0] == pytest.approx(3 * 200**2)

    def test_pairwise_shape(self):
        m = registry.get('cielab')
        a = m.to_space(np.zeros((5, 3), dtype=np.uint8))
        b = m.to_space(DEFAULT_PALETTE.rgb_array)
        assert m.pairwise(a, b).shape == (5, len(DEFAULT_PALETTE))


class TestNearest:
    @pytest.mark.parametrize('metric', METRICS)
    def test_every_palette_colour_matches_itself(self, metric):
        matcher = PaletteMatcher(DEFAULT_PALETTE, metric)
        for colour in DEFAULT_PALETTE:
            match, dist = matcher.nearest(colour.rgb)
            assert match is colour, f'{colour.name} matched {match.name} under {metric}'
            assert dist == pytest.approx(0.0, abs=1e-9)

    def test_near_red(self):
        match, dist = PaletteMatcher(DEFAULT_PALETTE).nearest((250, 6, 4))
        assert match.name == 'Red'
        assert dist > 0

    def test_tie_goes_to_first_entry(self):
        palette = Palette.from_entries(
            [
                {'hex': '#020202', 'name': 'Soot'},
                {'hex': '#000000', 'name': 'Black'},
            ]
        )
        match, _dist = PaletteMatcher(palette, 'rgb').nearest((1, 1, 1))
        assert match.name == 'Soot'

    def test_accepts_metric_object(self):
        matcher = PaletteMatcher(DEFAULT_PALETTE, registry.get('redmean'))
        assert matcher.metric.name == 'redmean'

    def test_unknown_metric(self):
        with pytest.raises(KeyError):
            PaletteMatcher(DEFAULT_PALETTE, 'nope')


class TestLabelImage:
    def test_matches_per_pixel_lookup(self):
        rng = np.random.default_rng(7)
        img = rng.integers(0, 256, (6, 5, 3), dtype=np.uint8)
        matcher = PaletteMatcher(DEFAULT_PALETTE)
        labels = matcher.label_image(img)
        assert labels.shape == (6, 5)
        for y in range(6):
            for x in range(5):
                expected, _ = matcher.nearest(tuple(int(c) for c in img[y, x]))
                assert DEFAULT_PALETTE[int(labels[y, x])] is expected

    def test_repeated_colours(self):
        img = np.zeros((3, 3, 3), dtype=np.uint8)
        img[1, 1] = (255, 255, 255)
        labels = PaletteMatcher(DEFAULT_PALETTE).label_image(img)
        assert int(labels[1, 1]) == DEFAULT_PALETTE.index_of('#FFFFFF')
        assert int(labels[0, 0]) == DEFAULT_PALETTE.index_of('#000000')
        assert int((labels == labels[0, 0]).sum()) == 8

    def test_large_image_is_chunked(self):
        # More distinct colours than one matching chunk
        values = np.arange(5000, dtype=np.uint32)
        img = np.stack([values % 256, (values // 256) % 256, np.full_like(values, 77)], axis=-1).astype(np.uint8)
        labels = PaletteMatcher(DEFAULT_PALETTE, 'rgb').label_image(img.reshape(50, 100, 3))
        assert labels.shape == (50, 100)
        assert labels.min() >= 0
        assert labels.max() < len(DEFAULT_PALETTE)


def _two_colour_buffer() -> RawImageBuffer:
    arr = np.full((4, 4, 4), 255, dtype=np.uint8)
    arr[1:3, 1:3, 1:3] = 0
    return RawImageBuffer.from_array(arr)


class TestPaletteSpace:
    def test_cielab_reuses_precomputed_lab(self):
        assert DEFAULT_PALETTE.space(registry.get('cielab')) is DEFAULT_PALETTE.lab_array

    def test_other_metrics_cached_per_palette(self):
        metric = registry.get('redmean')
        first = DEFAULT_PALETTE.space(metric)
        assert DEFAULT_PALETTE.space(metric) is first
        assert PaletteMatcher(DEFAULT_PALETTE, metric)._palette_space is first
        with pytest.raises(ValueError):
            first[0, 0] = 1.0

    def test_palette_lab_not_recomputed_per_request(self, monkeypatch):
        sizes = []
        real = cielab.rgb_array_to_lab

        def spy(rgb):
            sizes.append(len(rgb))
            return real(rgb)

        monkeypatch.setattr(cielab, 'rgb_array_to_lab', spy)
        buffer = _two_colour_buffer()
        convert(buffer, 4)
        convert(buffer, 4)
        assert sizes == [2, 2]

    def test_custom_metric_converts_palette_once(self):
        sizes = []
        metric = ColourMetric(name='counting', help='RGB with a call log')

        @metric.space
        def to_space(rgb):
            sizes.append(len(rgb))
            return rgb.astype(np.float64)

        buffer = _two_colour_buffer()
        convert(buffer, 4, metric=metric)
        convert(buffer, 4, metric=metric)
        assert sizes.count(len(DEFAULT_PALETTE)) == 1
