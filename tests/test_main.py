import pytest

from inkcrop import main as cli
from inkcrop.config import DITHER_ALGORITHMS


def _parse(*argv):
    return cli.config_from_args(cli.build_parser().parse_args(list(argv)))


class TestArguments:

    def test_defaults(self):
        config = _parse()
        assert config.input == "*.jp*g"
        assert config.options.dither_enabled
        assert config.options.dither_algorithm == "StevenPigeon"
        assert config.link_timer == 900
        assert not (config.daemon or config.link or config.dither_all)

    def test_single_dash_flags(self):
        config = _parse(
            "-input", "photos/*.png",
            "-output", "frames",
            "-ditherAlg", "sierra2",
            "-ditherStrength", "0.5",
            "-ditherSerpentine",
            "-rotate",
            "-crop",
            "-quality", "95",
            "-link",
            "-link-timer", "30",
        )
        assert config.input == "photos/*.png"
        assert str(config.output) == "frames"
        assert config.options.dither_algorithm == "Sierra2"
        assert config.options.dither_strength == pytest.approx(0.5)
        assert config.options.serpentine
        assert config.options.force_rotate and config.options.force_crop
        assert config.options.quality == 95
        assert config.link and config.link_timer == 30

    def test_no_dither(self):
        assert not _parse("--no-dither").options.dither_enabled

    def test_on_error(self):
        assert _parse("--on-error", "continue").error_policy == "continue"


class TestMain:

    def test_batch_run(self, make_image, tmp_path):
        make_image("one.jpg", 64, 36)
        make_image("two.jpg", 36, 64)
        out = tmp_path / "frames"

        code = cli.main(["-input", str(tmp_path / "in" / "*.jpg"), "-output", str(out), "--no-dither"])

        assert code == 0
        assert sorted(p.name for p in out.iterdir()) == [
            "one_960x540_0x0_resized.jpg",
            "two_960x540_0x0_resized.jpg",
        ]

    def test_unknown_algorithm_is_usage_error(self, tmp_path):
        with pytest.raises(SystemExit) as info:
            cli.main(["-output", str(tmp_path / "o"), "-ditherAlg", "Ordered"])
        assert info.value.code == 2

    def test_decode_failure_exit_code(self, tmp_path):
        (tmp_path / "bad.jpg").write_text("nope")
        code = cli.main(["-input", str(tmp_path / "*.jpg"), "-output", str(tmp_path / "o"), "--no-dither"])
        assert code == 1

    def test_dither_all(self, make_image, tmp_path):
        make_image("tiny.png", 16, 9)
        out = tmp_path / "o"
        code = cli.main(["-input", str(tmp_path / "in" / "*.png"), "-output", str(out), "-ditherAll"])
        assert code == 0
        assert len(list(out.iterdir())) == len(DITHER_ALGORITHMS)

    def test_link_mode_dispatches_slideshow(self, make_image, tmp_path, monkeypatch):
        make_image("a.jpg", 8, 8)
        calls = []

        async def fake_run(self):
            calls.append((self.files, self.link_timer))

        monkeypatch.setattr(cli.SlideshowDaemon, "run", fake_run)
        code = cli.main(["-input", str(tmp_path / "in" / "*.jpg"), "-output", str(tmp_path / "o"), "-link", "-link-timer", "7"])

        assert code == 0
        assert calls == [((tmp_path / "in" / "a.jpg",), 7)]

    def test_daemon_processes_existing_then_watches(self, make_image, tmp_path, monkeypatch):
        make_image("first.jpg", 64, 36)
        watched = []
        monkeypatch.setattr(cli.WatchTrigger, "run", lambda self: watched.append(self.directory))
        out = tmp_path / "o"

        code = cli.main(["-input", str(tmp_path / "in" / "*.jpg"), "-output", str(out), "--no-dither", "-daemon"])

        assert code == 0
        assert watched == [tmp_path / "in"]
        assert [p.name for p in out.iterdir()] == ["first_960x540_0x0_resized.jpg"]
