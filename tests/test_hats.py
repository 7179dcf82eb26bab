import numpy as np
import pytest

from conftest import art, mp, with_column, write_png
from core.animations import AnimationKind
from core.bitmap import read_bitmap, read_metapixels
from core.errors import BundleIOError, InvalidBundleError
from core.hats import (
    DEFAULT_WINGS_OFFSET,
    Extra,
    FlyingPet,
    HatKind,
    LinkFrameState,
    Preview,
    Room,
    WalkingPet,
    Wearable,
    Wings,
    available_animations,
    classify_stem,
    load_element,
)
from core.metapixels import Metapixel, OpCode

SKIP = (0, 0, 0, 0)


def wearable_png(tmp_path, name="hat_64_32.png"):
    bitmap = with_column(art(64, 32), [
        mp(OpCode.STRAPPED_ON),
        mp(OpCode.FRAME_SIZE, 32, 32),
        mp(OpCode.LINK_FRAME_STATE, 1),
        mp(OpCode.ANIMATION_TYPE, 1), SKIP,
        mp(OpCode.ANIMATION_DELAY, 6),
        mp(OpCode.ANIMATION_LOOP, 1),
        mp(OpCode.ANIMATION_FRAME_PERIOD, 0, 1),
    ])
    return write_png(tmp_path / name, bitmap)


def test_kind_names():
    assert HatKind.WEARABLE.display_name == "Wearable Hat"
    assert HatKind.EXTRA.save_name == "extrahat"
    assert HatKind.FLYING_PET.is_pet and not HatKind.ROOM.is_pet
    assert LinkFrameState.DEFAULT.display_name == "None"
    assert LinkFrameState.from_byte(9) is LinkFrameState.DEFAULT


@pytest.mark.parametrize("name, kind", [
    ("hat", HatKind.WEARABLE),
    ("HAT", HatKind.WEARABLE),
    ("wings", HatKind.WINGS),
    ("extrahat", HatKind.EXTRA),
    ("room", HatKind.ROOM),
    ("preview", HatKind.PREVIEW),
    ("myflyingpet", HatKind.FLYING_PET),
    ("WalkingPet2", HatKind.WALKING_PET),
    ("hatty", None),
    ("readme", None),
])
def test_classify_stem(name, kind):
    assert classify_stem(name) == kind


def test_available_animations():
    assert AnimationKind.ON_PRESS_QUACK in available_animations(HatKind.WEARABLE)
    assert AnimationKind.GLIDING in available_animations(HatKind.WINGS)
    assert AnimationKind.ON_APPROACH in available_animations(HatKind.WALKING_PET)
    assert available_animations(HatKind.ROOM) == ()


def test_load_wearable(tmp_path, texture_loader):
    element = Wearable.load(wearable_png(tmp_path), texture_loader)
    assert element.art_area_size == (64, 32)
    assert element.frame_size == (32, 32)
    assert element.strapped_on
    assert not element.is_big
    assert element.link_frame_state is LinkFrameState.SAVED
    assert element.frames_amount() == 2
    assert len(element.animations) == 1
    animation = element.animations[0]
    assert animation.kind == AnimationKind.ON_PRESS_QUACK
    assert (animation.delay, animation.looping, animation.frame_values) == (6, True, [0, 1])
    assert element.texture is texture_loader.created[0]
    assert element.name == "hat"


def test_wearable_roundtrip(tmp_path):
    element = Wearable.load(wearable_png(tmp_path))
    out = tmp_path / "out"
    out.mkdir()
    path = element.save(out)
    assert path.name == "hat_64_32.png"
    again = Wearable.load(path)
    assert again.gen_metapixels() == element.gen_metapixels()
    assert np.array_equal(read_bitmap(path)[:, :64], element.bitmap[:, :64])


def test_wearable_encoding_order():
    element = Wearable(frame_size=(64, 32), art_area_size=(64, 32), strapped_on=True,
                       on_spawn_animation=AnimationKind.ON_RESURRECT,
                       link_frame_state=LinkFrameState.INVERTED)
    assert element.gen_metapixels() == [
        Metapixel(OpCode.STRAPPED_ON),
        Metapixel(OpCode.IS_BIG_HAT),
        Metapixel(OpCode.FRAME_SIZE, 64, 32),
        Metapixel(OpCode.ON_SPAWN_ANIMATION, 11),
        Metapixel(OpCode.LINK_FRAME_STATE, 2),
    ]


def test_metapixels_after_art_without_size_suffix(tmp_path):
    # without a size suffix the whole image is art and nothing is decoded
    bitmap = with_column(art(32, 32), [mp(OpCode.STRAPPED_ON)])
    element = load_element(HatKind.WEARABLE, write_png(tmp_path / "hat.png", bitmap))
    assert element.art_area_size == (33, 32)
    assert not element.strapped_on


def test_load_element_ignores_foreign_name(tmp_path):
    path = write_png(tmp_path / "sprite_32_32.png", art(32, 32))
    element = load_element(HatKind.WEARABLE, path)
    assert element.name is None
    assert element.save_name() == "hat"
    assert element.file_name() == "hat_32_32.png"


def test_wings_defaults_and_decode(tmp_path):
    bitmap = with_column(art(64, 32), [
        mp(OpCode.WINGS_GENERAL_OFFSET, 130, 120),
        mp(OpCode.WINGS_NET_OFFSET, 128, 140),
        mp(OpCode.GENERATE_WINGS_ANIMATIONS),
        mp(OpCode.WINGS_AUTO_IDLE_FRAME, 1),
        mp(OpCode.WINGS_AUTO_ANIMATIONS_SPEED, 7),
        mp(OpCode.FRAME_SIZE, 32, 32),
    ])
    wings = Wings.load(write_png(tmp_path / "wings_64_32.png", bitmap))
    assert wings.general_offset == (130, 120)
    assert wings.signed_offset('general_offset') == (2, -8)
    assert wings.net_offset == (128, 140)
    assert wings.crouch_offset == DEFAULT_WINGS_OFFSET
    assert wings.gen_animations
    assert wings.auto_idle_frame == 2
    assert wings.auto_glide_frame == 2
    assert wings.auto_anim_speed == 7
    assert [a.kind for a in wings.animations] == [AnimationKind.ON_DEFAULT]
    assert wings.animations[0].delay == 7
    assert wings.animations[0].frame_values == [0, 1]


def test_wings_encode_order_and_wire_values():
    wings = Wings(frame_size=(32, 32), art_area_size=(96, 32))
    assert wings.auto_glide_frame == 3
    wings.set_signed_offset('crouch_offset', (1, -1))
    wings.set_signed_offset('general_offset', (0, 5))
    wings.auto_glide_frame = 1
    wings.auto_idle_frame = 3
    wings.changes_animations = True
    wings.set_auto_anim_speed(5)
    assert wings.gen_metapixels() == [
        Metapixel(OpCode.WINGS_GENERAL_OFFSET, 128, 133),
        Metapixel(OpCode.WINGS_CROUCH_OFFSET, 129, 127),
        Metapixel(OpCode.CHANGE_ANIMATIONS_EVERY_LEVEL),
        Metapixel(OpCode.WINGS_AUTO_ANIMATIONS_SPEED, 5),
        Metapixel(OpCode.WINGS_AUTO_GLIDE_FRAME, 0),
        Metapixel(OpCode.WINGS_AUTO_IDLE_FRAME, 2),
        Metapixel(OpCode.FRAME_SIZE, 32, 32),
    ]


def test_wings_roundtrip(tmp_path):
    wings = Wings(frame_size=(32, 32), art_area_size=(64, 32), bitmap=art(64, 32))
    wings.set_signed_offset('slide_offset', (-3, 4))
    wings.size_state = True
    wings.auto_glide_frame = 1
    path = wings.save(tmp_path)
    again = Wings.load(path)
    assert again.slide_offset == wings.slide_offset
    assert again.size_state
    assert again.auto_glide_frame == 1
    assert again.gen_metapixels() == wings.gen_metapixels()


def test_extra_default_frame_size_and_animation(tmp_path):
    extra = Extra.load(write_png(tmp_path / "extrahat_100_60.png", art(100, 60)))
    assert extra.frame_size == (97, 56)
    assert extra.frames_amount() == 1
    assert extra.animations[0].frame_values == [0]
    assert extra.gen_metapixels() == [Metapixel(OpCode.FRAME_SIZE, 97, 56)]


def test_extra_frame_size_limits():
    extra = Extra(art_area_size=(200, 200))
    extra.set_frame_size(500, 10)
    assert extra.frame_size == (97, 32)
    wearable = Wearable()
    wearable.set_frame_size(80, 40)
    assert wearable.frame_size == (64, 40)


def test_flying_pet_decode_and_encode(tmp_path):
    bitmap = with_column(art(64, 32), [
        mp(OpCode.PET_DISTANCE, 30),
        mp(OpCode.PET_NO_FLIP),
        mp(OpCode.PET_CHANGES_ANGLE),
        mp(OpCode.PET_SPEED, 3),
        mp(OpCode.FRAME_SIZE, 32, 32),
        mp(OpCode.ANIMATION_TYPE, 4), SKIP,
        mp(OpCode.ANIMATION_DELAY, 2),
        mp(OpCode.ANIMATION_LOOP, 0),
        mp(OpCode.ANIMATION_FRAME, 1),
        mp(OpCode.ANIMATION_FRAME, 0),
    ])
    pet = FlyingPet.load(write_png(tmp_path / "bird_flyingpet_64_32.png", bitmap))
    assert pet.name == "bird_flyingpet"
    assert (pet.distance, pet.flipped, pet.changes_angle, pet.speed) == (30, False, True, 3)
    assert pet.animations[0].kind == AnimationKind.ON_APPROACH
    assert pet.animations[0].frame_values == [1, 0]
    assert pet.gen_metapixels() == [
        Metapixel(OpCode.PET_DISTANCE, 30),
        Metapixel(OpCode.PET_NO_FLIP),
        Metapixel(OpCode.FRAME_SIZE, 32, 32),
        Metapixel(OpCode.PET_CHANGES_ANGLE),
        Metapixel(OpCode.PET_SPEED, 3),
        Metapixel(OpCode.ANIMATION_TYPE, 4),
        Metapixel(OpCode.ANIMATION_DELAY, 2),
        Metapixel(OpCode.ANIMATION_LOOP, 0),
        Metapixel(OpCode.ANIMATION_FRAME_PERIOD, 1, 0),
    ]


def test_walking_pet_defaults_emit_only_frame_size():
    pet = WalkingPet()
    assert pet.flipped
    assert pet.gen_metapixels() == [Metapixel(OpCode.FRAME_SIZE, 32, 32)]


def test_room_ignores_metapixels(tmp_path):
    bitmap = with_column(art(48, 40), [mp(OpCode.FRAME_SIZE, 32, 32)])
    room = Room.load(write_png(tmp_path / "room_48_40.png", bitmap))
    assert room.frame_size == (48, 40)
    assert room.gen_metapixels() == []
    room.replace_image(art(50, 30))
    assert room.frame_size == (50, 30)


def test_preview_uses_whole_image(tmp_path):
    preview = Preview.load(write_png(tmp_path / "preview_10_10.png", art(40, 30)))
    assert preview.art_area_size == (40, 30)
    assert preview.file_name() == "preview_40_30.png"


def test_saved_image_holds_metapixels_after_art(tmp_path):
    element = Wearable.load(wearable_png(tmp_path))
    path = element.save(tmp_path, "hatcopy")
    assert path.name == "hatcopy_64_32.png"
    bitmap = read_bitmap(path)
    assert bitmap.shape == (32, 65, 4)
    assert read_metapixels(bitmap, 64) == element.gen_metapixels()


def test_save_without_bitmap_raises(tmp_path):
    with pytest.raises(BundleIOError):
        Wearable().save(tmp_path)


def test_animation_capabilities():
    element = Wearable()
    animation = element.add_animation(AnimationKind.ON_DEFAULT)
    assert (animation.delay, animation.looping, animation.frames) == (4, False, [])
    with pytest.raises(ValueError):
        element.add_animation(AnimationKind.ON_DEFAULT)
    with pytest.raises(ValueError):
        element.add_animation(AnimationKind.GLIDING)
    assert element.can_add_animation()
    assert element.remove_animation(AnimationKind.ON_DEFAULT) is animation
    assert element.animation(AnimationKind.ON_DEFAULT) is None
    assert not Room().can_add_animation()


def test_replace_image_keeps_fields():
    element = Wearable(art_area_size=(64, 32), bitmap=art(64, 32), strapped_on=True)
    old_id = element.id
    element.replace_image(art(96, 64), (96, 64))
    assert element.id == old_id
    assert element.art_area_size == (96, 64)
    assert element.strapped_on
    with pytest.raises(InvalidBundleError):
        element.replace_image(art(32, 32), (64, 32))


def test_release_deletes_once(texture_loader, tmp_path):
    element = Wearable.load(wearable_png(tmp_path), texture_loader)
    texture = element.texture
    element.release()
    element.release()
    assert texture.delete_calls == 1
    assert element.texture is None


def test_element_ids_are_unique():
    assert Wearable().id != Wearable().id
