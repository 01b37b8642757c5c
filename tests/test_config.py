from dataclasses import FrozenInstanceError, replace
from pathlib import Path

import pytest

from inkcrop.config import ProcessingOptions, RunConfig, canonical_algorithm
from inkcrop.errors import UnknownAlgorithmError


class TestProcessingOptions:

    def test_defaults(self):
        opts = ProcessingOptions()
        assert opts.dither_enabled
        assert opts.dither_algorithm == "StevenPigeon"
        assert opts.dither_strength == pytest.approx(0.9)
        assert opts.quality == 80
        assert (opts.canvas_width, opts.canvas_height) == (960, 540)

    def test_algorithm_is_canonicalized(self):
        assert ProcessingOptions(dither_algorithm="atkinson").dither_algorithm == "Atkinson"

    def test_unknown_algorithm_rejected_when_dithering(self):
        with pytest.raises(UnknownAlgorithmError):
            ProcessingOptions(dither_algorithm="Ordered")

    def test_unknown_algorithm_ignored_without_dithering(self):
        opts = ProcessingOptions(dither_enabled=False, dither_algorithm="Ordered")
        assert opts.dither_algorithm == "Ordered"

    @pytest.mark.parametrize("strength", [-0.1, 1.5])
    def test_strength_range(self, strength):
        with pytest.raises(ValueError):
            ProcessingOptions(dither_strength=strength)

    @pytest.mark.parametrize("quality", [-1, 101])
    def test_quality_range(self, quality):
        with pytest.raises(ValueError):
            ProcessingOptions(quality=quality)

    def test_immutable(self):
        opts = ProcessingOptions()
        with pytest.raises(FrozenInstanceError):
            opts.quality = 10

    def test_replace_revalidates(self):
        opts = ProcessingOptions(dither_enabled=False)
        variant = replace(opts, dither_enabled=True, dither_algorithm="burkes")
        assert variant.dither_algorithm == "Burkes"
        assert not opts.dither_enabled


class TestRunConfig:

    def test_defaults(self):
        config = RunConfig()
        assert config.input == "*.jp*g"
        assert config.output == Path("output")
        assert config.link_timer == 900
        assert config.error_policy == "abort"

    def test_link_timer_positive(self):
        with pytest.raises(ValueError):
            RunConfig(link_timer=0)

    def test_error_policy_checked(self):
        with pytest.raises(ValueError):
            RunConfig(error_policy="retry")


def test_canonical_algorithm_strips_and_folds():
    assert canonical_algorithm("  falsefloydsteinberg ") == "FalseFloydSteinberg"
