import logging

import cv2

from colorbar.main import EXIT_CONFIG_ERROR, EXIT_OK, EXIT_RUNTIME_ERROR, main

from conftest import smooth_image, solid_image


def _no_config(tmp_path):
    return ["--config", str(tmp_path / "absent.yaml")]


def _write_clip(path, frames):
    height, width = frames[0].shape[:2]
    writer = cv2.VideoWriter(path, cv2.VideoWriter_fourcc(*"MJPG"), 25.0, (width, height))
    for frame in frames:
        writer.write(frame)
    writer.release()


def test_hash_prints_fingerprints(tmp_path, reference_path, capsys):
    code = main(_no_config(tmp_path) + ["hash", reference_path])
    assert code == EXIT_OK
    out = capsys.readouterr().out.strip()
    digest, path = out.split(maxsplit=1)
    assert len(digest) == 16
    assert path == reference_path


def test_hash_reports_unreadable_files(tmp_path, reference_path, capsys):
    code = main(_no_config(tmp_path) + ["hash", str(tmp_path / "missing.png"), reference_path])
    assert code == EXIT_RUNTIME_ERROR
    assert reference_path in capsys.readouterr().out


def test_hash_with_bad_block_size(tmp_path, reference_path):
    assert main(_no_config(tmp_path) + ["--block-size", "9", "hash", reference_path]) == EXIT_CONFIG_ERROR


def test_detect_without_file_fails_before_frames(tmp_path, caplog):
    code = main(_no_config(tmp_path) + ["detect", "--threshold", "10", "--source", "unused.avi"])
    assert code == EXIT_CONFIG_ERROR
    assert "'file'" in caplog.text


def test_detect_rejects_out_of_range_threshold(tmp_path, reference_path):
    for threshold in ("65", "-1"):
        args = _no_config(tmp_path) + ["detect", "--file", reference_path,
                                       "--threshold", threshold, "--source", "unused.avi"]
        assert main(args) == EXIT_CONFIG_ERROR


def test_detect_with_missing_reference(tmp_path):
    args = _no_config(tmp_path) + ["detect", "--file", str(tmp_path / "nope.png"),
                                   "--threshold", "10", "--source", "unused.avi"]
    assert main(args) == EXIT_CONFIG_ERROR


def test_detect_with_unopenable_source(tmp_path, reference_path):
    args = _no_config(tmp_path) + ["detect", "--file", reference_path, "--threshold", "10",
                                   "--source", str(tmp_path / "missing.avi")]
    assert main(args) == EXIT_RUNTIME_ERROR


def test_detect_reads_yaml_config(tmp_path, reference_path, reference_image, caplog):
    caplog.set_level(logging.INFO)
    clip = str(tmp_path / "clip.avi")
    _write_clip(clip, [solid_image()] * 2 + [reference_image] * 3 + [smooth_image(seed=3)] * 2)
    config = tmp_path / "config.yaml"
    config.write_text(
        f"file: {reference_path}\nthreshold: 10\nsource: {clip}\nconfirm_frames: 2\n",
        encoding="utf-8",
    )

    code = main(["--config", str(config), "detect"])
    assert code == EXIT_OK
    assert "MATCH START at frame 3" in caplog.text
    assert "MATCH END at frame 5" in caplog.text


def test_detect_with_badly_typed_yaml_option(tmp_path, reference_path, caplog):
    config = tmp_path / "config.yaml"
    for line in ("grid_size: big", "update_interval_ms: fast"):
        config.write_text(f"file: {reference_path}\nthreshold: 10\n{line}\n", encoding="utf-8")
        caplog.clear()
        assert main(["--config", str(config), "detect", "--source", "unused.avi"]) == EXIT_CONFIG_ERROR
        assert line.split(":")[0] in caplog.text


def test_non_positive_grid_size_flag(tmp_path, reference_path):
    assert main(_no_config(tmp_path) + ["--grid-size", "0", "hash", reference_path]) == EXIT_CONFIG_ERROR
