import os

from conftest import FakeTexture, art, write_png
from renderer.texture_reloader import TextureReloader


def touch(path, seconds):
    os.utime(path, (seconds, seconds))


def test_add_requires_existing_file(tmp_path):
    reloader = TextureReloader()
    assert not reloader.add_texture(FakeTexture())
    assert not reloader.add_texture(FakeTexture(tmp_path / "missing.png"))
    assert len(reloader) == 0


def test_poll_reloads_changed_files(tmp_path):
    path = write_png(tmp_path / "hat_32_32.png", art(32, 32))
    touch(path, 1_000)
    texture = FakeTexture(path)
    reloader = TextureReloader()
    assert reloader.add_texture(texture)

    assert reloader.poll() == 0
    touch(path, 2_000)
    assert reloader.poll() == 1
    assert texture.replaced_from == [path]
    assert reloader.poll() == 0


def test_poll_forgets_deleted_textures(tmp_path):
    path = write_png(tmp_path / "hat_32_32.png", art(32, 32))
    texture = FakeTexture(path)
    reloader = TextureReloader()
    reloader.add_texture(texture)
    texture.delete()
    reloader.poll()
    assert texture not in reloader


def test_retarget_and_remove(tmp_path):
    old = write_png(tmp_path / "a_32_32.png", art(32, 32))
    new = write_png(tmp_path / "b_32_32.png", art(32, 32))
    touch(old, 1_000)
    touch(new, 1_000)
    texture = FakeTexture(old)
    reloader = TextureReloader()
    reloader.add_texture(texture)
    assert reloader.retarget(texture, new)
    assert len(reloader) == 1

    touch(old, 3_000)
    assert reloader.poll() == 0
    touch(new, 3_000)
    assert reloader.poll() == 1
    assert texture.replaced_from == [new]

    reloader.remove_texture(texture)
    assert len(reloader) == 0
