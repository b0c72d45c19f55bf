"""Tests for bead_pattern.stages.voting — grid sizing, block bounds, background detection, cell election."""

import numpy as np
import pytest
from bead_pattern.core.palette import DEFAULT_PALETTE
from bead_pattern.core.types import TRANSPARENT, RawImageBuffer
from bead_pattern.matcher import PaletteMatcher
from bead_pattern.stages.voting import block_bounds, detect_background, elect, grid_dimensions, vote_grid

P = DEFAULT_PALETTE
BLACK = P.index_of('#000000')
WHITE = P.index_of('#FFFFFF')
GREY = P.index_of('#888888')
BROWN = P.index_of('#A05F35')
RED = P.index_of('#FF0000')
PINK = P.index_of('#FFC0CB')
DARK_BLUE = P.index_of('#00008B')


def _block(labels: list[int], transparent: int = 0) -> tuple[np.ndarray, np.ndarray]:
    """One row of opaque labels followed by `transparent` fully transparent samples."""
    all_labels = np.array(labels + [GREY] * transparent, dtype=np.intp).reshape(1, -1)
    alpha = np.array([255] * len(labels) + [0] * transparent, dtype=np.uint8).reshape(1, -1)
    return all_labels, alpha


class TestGridDimensions:
    def test_landscape(self):
        assert grid_dimensions(100, 50, 32) == (32, 16)

    def test_portrait(self):
        assert grid_dimensions(50, 100, 32) == (16, 32)

    def test_square(self):
        assert grid_dimensions(640, 640, 48) == (48, 48)

    def test_rounds_half_up(self):
        # 10 / 4 = 2.5
        assert grid_dimensions(4, 1, 10) == (10, 3)

    def test_never_below_one(self):
        assert grid_dimensions(1000, 1, 10) == (10, 1)
        assert grid_dimensions(1, 1000, 10) == (1, 10)

    @pytest.mark.parametrize('size', [0, -3])
    def test_rejects_non_positive(self, size):
        with pytest.raises(ValueError):
            grid_dimensions(10, 10, size)


class TestBlockBounds:
    def test_pads_twenty_percent(self):
        assert block_bounds(0, 0, (10, 10), (2, 2)) == (1, 1, 4, 4)
        assert block_bounds(1, 1, (10, 10), (2, 2)) == (6, 6, 9, 9)

    def test_small_blocks_not_padded(self):
        # 4px block: floor(0.8) = 0
        assert block_bounds(1, 0, (8, 4), (2, 1)) == (4, 0, 8, 4)

    def test_vertical_pad_uses_block_height(self):
        # 10px wide, 5px tall blocks → pad 2 horizontally, 1 vertically
        assert block_bounds(0, 0, (20, 10), (2, 2)) == (2, 1, 8, 4)

    def test_sub_pixel_block_uses_nearest_pixel(self):
        for x in range(4):
            x0, y0, x1, y1 = block_bounds(x, x, (2, 2), (4, 4))
            assert x1 - x0 == 1 and y1 - y0 == 1
            assert 0 <= x0 < 2 and 0 <= y0 < 2


class TestDetectBackground:
    def test_majority_corner(self):
        labels = np.array([[RED, WHITE], [WHITE, WHITE]])
        alpha = np.full((2, 2), 255, dtype=np.uint8)
        assert detect_background(labels, alpha, P) == '#FFFFFF'

    def test_tie_goes_to_first_corner(self):
        # TL red, TR white, BL white, BR red
        labels = np.array([[RED, WHITE], [WHITE, RED]])
        alpha = np.full((2, 2), 255, dtype=np.uint8)
        assert detect_background(labels, alpha, P) == '#FF0000'

    def test_only_corners_sampled(self):
        labels = np.full((3, 3), GREY)
        labels[1, 1] = RED
        labels[0, 1] = RED
        alpha = np.full((3, 3), 255, dtype=np.uint8)
        assert detect_background(labels, alpha, P) == '#888888'

    def test_transparent_corners(self):
        labels = np.full((3, 3), BLACK)
        alpha = np.zeros((3, 3), dtype=np.uint8)
        alpha[1, 1] = 255
        assert detect_background(labels, alpha, P) == TRANSPARENT


class TestElect:
    def test_mostly_transparent(self):
        labels, alpha = _block([GREY] * 3, transparent=7)
        assert elect(labels, alpha, P, TRANSPARENT) == TRANSPARENT

    def test_sixty_percent_transparent_is_kept(self):
        labels, alpha = _block([BROWN] * 4, transparent=6)
        assert elect(labels, alpha, P, TRANSPARENT) == '#A05F35'

    def test_alpha_cutoff(self):
        labels = np.array([[BROWN, BROWN]])
        alpha = np.array([[127, 128]], dtype=np.uint8)
        # one transparent of two is 50%, not above 60%
        assert elect(labels, alpha, P, TRANSPARENT) == '#A05F35'

    def test_feature_beats_majority(self):
        labels, alpha = _block([PINK] + [GREY] * 3)
        assert elect(labels, alpha, P, '#FFFFFF') == '#FFC0CB'

    def test_feature_matching_background_ignored(self):
        labels, alpha = _block([PINK] + [GREY] * 3)
        assert elect(labels, alpha, P, '#FFC0CB') == '#888888'

    def test_feature_needs_fifteen_percent(self):
        labels, alpha = _block([PINK] + [GREY] * 9)
        assert elect(labels, alpha, P, TRANSPARENT) == '#888888'

    def test_largest_feature_wins(self):
        labels, alpha = _block([PINK] * 2 + [RED] * 3 + [GREY] * 5)
        assert elect(labels, alpha, P, TRANSPARENT) == '#FF0000'

    def test_feature_share_excludes_transparent_samples(self):
        # 1 pink of 5 opaque = 20% even though it is 1 of 10 samples overall
        labels, alpha = _block([PINK] + [GREY] * 4, transparent=5)
        assert elect(labels, alpha, P, TRANSPARENT) == '#FFC0CB'

    def test_outline_votes_become_outline_token(self):
        labels, alpha = _block([DARK_BLUE] * 3 + [GREY] * 7)
        assert elect(labels, alpha, P, '#FFFFFF') == '#000000'

    def test_outline_needs_twenty_percent(self):
        labels, alpha = _block([DARK_BLUE] * 2 + [GREY] * 8)
        assert elect(labels, alpha, P, '#FFFFFF') == '#888888'

    def test_outline_suppressed_on_black_background(self):
        labels, alpha = _block([DARK_BLUE] * 3 + [GREY] * 7)
        assert elect(labels, alpha, P, '#000000') == '#888888'

    def test_dominant_colour(self):
        labels, alpha = _block([BROWN] * 6 + [GREY] * 4)
        assert elect(labels, alpha, P, TRANSPARENT) == '#A05F35'

    def test_dominant_tie_first_seen(self):
        labels = np.array([[GREY, BROWN], [BROWN, GREY]])
        alpha = np.full((2, 2), 255, dtype=np.uint8)
        assert elect(labels, alpha, P, TRANSPARENT) == '#888888'
        assert elect(labels.T[::-1], alpha, P, TRANSPARENT) == '#A05F35'


class TestVoteGrid:
    def test_uniform_image(self):
        arr = np.zeros((20, 40, 4), dtype=np.uint8)
        arr[..., :3] = (160, 95, 53)
        arr[..., 3] = 255
        w, h, cells, bg = vote_grid(RawImageBuffer.from_array(arr), PaletteMatcher(P), 8)
        assert (w, h) == (8, 4)
        assert cells == ['#A05F35'] * 32
        assert bg == '#A05F35'

    def test_upscaling_tiny_source(self):
        arr = np.full((2, 2, 4), 255, dtype=np.uint8)
        w, h, cells, _bg = vote_grid(RawImageBuffer.from_array(arr), PaletteMatcher(P), 6)
        assert (w, h) == (6, 6)
        assert len(cells) == 36
        assert set(cells) == {'#FFFFFF'}
