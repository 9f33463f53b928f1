import numpy as np
import pytest
from scipy.spatial.transform import Rotation

from body_overlay.geometry import (
    apply_transform, compose_transforms, decompose_transform, display_transform,
    project_perspective, to_view_pixels, translation_matrix,
)
from body_overlay.models import Orientation


def test_identity_when_sizes_match():
    m = display_transform((640, 480), (640, 480))
    assert apply_transform((0.25, 0.5), m) == pytest.approx((0.25, 0.5))
    assert to_view_pixels((0.25, 0.5), (640, 480)) == pytest.approx((160.0, 240.0))


def test_portrait_rotates_image():
    m = display_transform((640, 480), (480, 640), Orientation.PORTRAIT)
    assert apply_transform((0.25, 0.5), m) == pytest.approx((0.5, 0.25))
    assert apply_transform((0.0, 0.0), m) == pytest.approx((1.0, 0.0))


def test_landscape_left_flips_both_axes():
    m = display_transform((640, 480), (640, 480), Orientation.LANDSCAPE_LEFT)
    assert apply_transform((0.25, 0.5), m) == pytest.approx((0.75, 0.5))


def test_aspect_fill_crops_wider_axis():
    # 640x480 채우기 -> 853.3x640, 좌우가 잘림
    m = display_transform((640, 480), (640, 640))
    x, y = apply_transform((0.25, 0.5), m)
    assert x == pytest.approx(0.25 * 4 / 3 - 1 / 6)
    assert y == pytest.approx(0.5)
    assert apply_transform((0.5, 0.5), m) == pytest.approx((0.5, 0.5))


def test_mirror():
    m = display_transform((640, 480), (640, 480), mirror=True)
    assert apply_transform((0.25, 0.5), m) == pytest.approx((0.75, 0.5))


def test_degenerate_sizes_give_identity():
    assert np.allclose(display_transform((0, 0), (640, 480)), np.eye(3))


def test_compose_translations():
    world = compose_transforms(translation_matrix(1, 2, 3), translation_matrix(0.1, 0, 0))
    position, rotation = decompose_transform(world)
    assert position == pytest.approx((1.1, 2.0, 3.0))
    assert rotation == pytest.approx((0.0, 0.0, 0.0, 1.0))


def test_compose_applies_anchor_rotation():
    anchor = np.eye(4)
    anchor[:3, :3] = Rotation.from_euler("y", 90, degrees=True).as_matrix()

    position, rotation = decompose_transform(compose_transforms(anchor, translation_matrix(1, 0, 0)))

    assert position == pytest.approx((0.0, 0.0, -1.0), abs=1e-9)
    s = np.sqrt(0.5)
    # q와 -q는 같은 회전
    assert abs(np.dot(rotation, (0.0, s, 0.0, s))) == pytest.approx(1.0)


def test_decompose_ignores_scale():
    m = np.diag([2.0, 2.0, 2.0, 1.0])
    _, rotation = decompose_transform(m)
    assert rotation == pytest.approx((0.0, 0.0, 0.0, 1.0))


def test_project_perspective():
    out = project_perspective(np.array([[0.0, 0.0, 0.0], [0.0, 0.5, 0.0]]), (400, 400))
    assert out[0, :2] == pytest.approx((200.0, 200.0))
    assert out[1, 1] < 200.0
    assert project_perspective(np.zeros((0, 3)), (400, 400)).shape == (0, 3)
