import os

from utils.file_utils import HatNameAndSize, file_modified_time, file_stem, parse_name_and_size


def test_parse_name_and_size():
    assert parse_name_and_size("hat_64_32") == HatNameAndSize("hat", (64, 32))


def test_parse_keeps_underscores_in_name():
    assert parse_name_and_size("my_cool_flyingpet_32_32") == HatNameAndSize("my_cool_flyingpet", (32, 32))


def test_parse_without_size():
    assert parse_name_and_size("hat") == HatNameAndSize("hat")
    assert parse_name_and_size("hat_32") == HatNameAndSize("hat_32")


def test_parse_rejects_non_numeric_and_zero():
    assert parse_name_and_size("hat_a_32").size is None
    assert parse_name_and_size("hat_0_32").size is None
    assert parse_name_and_size("hat_-1_32").size is None
    assert parse_name_and_size("hat_32_").size is None


def test_parse_empty_name_falls_back_to_stem():
    assert parse_name_and_size("_32_32") == HatNameAndSize("_32_32")


def test_file_stem():
    assert file_stem("/tmp/dir/hat_32_32.png") == "hat_32_32"


def test_file_modified_time(tmp_path):
    path = tmp_path / "a.png"
    path.write_bytes(b"x")
    os.utime(path, ns=(1_500_000_000_000_000_000, 1_500_000_000_123_000_000))
    assert file_modified_time(path) == 1_500_000_000_123
    assert file_modified_time(tmp_path / "missing.png") is None
