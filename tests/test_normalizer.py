import numpy as np
import pytest
import torch

from bbtxt_data.data import (
    AnnotatedImage, CropPlan, SampleNormalizer, SENTINEL_LABEL,
    denormalize_to_uint8, normalize_pixels,
)


def _labels(*boxes, capacity=5):
    entry = AnnotatedImage('x.png', capacity=capacity)
    for box in boxes:
        entry.add_box(*box)
    entry.finalize()
    return entry.labels


def test_pixel_normalization_values():
    image = np.array([[[128, 0, 255]]], dtype=np.uint8)

    data = normalize_pixels(image)

    assert data.shape == (3, 1, 1)
    assert data.dtype == np.float32
    assert data[0, 0, 0] == 0.0
    assert data[1, 0, 0] == -1.0
    assert data[2, 0, 0] == pytest.approx(0.9921875)


def test_planar_channel_major_layout():
    image = np.zeros((4, 6, 3), dtype=np.uint8)
    image[..., 0] = 10
    image[..., 1] = 20
    image[..., 2] = 30
    image[1, 2, 0] = 255

    data = normalize_pixels(image, dtype=np.float64)

    assert data.dtype == np.float64
    assert data.flags['C_CONTIGUOUS']
    assert np.allclose(data[1], (20 - 128) / 128)
    assert np.allclose(data[2], (30 - 128) / 128)
    assert data[0, 1, 2] == pytest.approx(127 / 128)
    # row-major inside a channel
    assert data.reshape(-1)[1 * 6 + 2] == pytest.approx(127 / 128)


def test_denormalize_inverts_normalize():
    image = np.random.default_rng(0).integers(0, 256, size=(8, 8, 3), dtype=np.uint8)
    data = normalize_pixels(image)

    assert np.array_equal(denormalize_to_uint8(data), image)
    assert np.array_equal(denormalize_to_uint8(torch.from_numpy(data)), image)


def test_identity_crop_keeps_boxes_and_pixels():
    image = np.random.default_rng(1).integers(0, 256, size=(60, 80, 3), dtype=np.uint8)
    labels = _labels((1, 5.5, 6.25, 30, 40), (2, 0, 0, 80, 60))
    original = labels.copy()
    normalizer = SampleNormalizer(80, 60)

    data, out = normalizer.apply(image, labels, CropPlan.whole_image(80, 60, 80, 60))

    assert np.allclose(out, original)
    assert np.array_equal(denormalize_to_uint8(data), image)


def test_transform_moves_every_real_box():
    labels = _labels((0, 10, 20, 30, 40), (1, 50, 60, 70, 80))
    plan = CropPlan(x=10, y=20, width=100, height=50, top=0, bottom=0, left=0, right=0,
                    output_width=50, output_height=100)

    SampleNormalizer.transform_boxes(labels, plan)

    # x scaled by 50/100, y by 100/50
    assert labels[0].tolist() == [0, 0, 0, 10, 40]
    assert labels[1].tolist() == [1, 20, 80, 30, 120]


def test_transform_leaves_sentinel_untouched():
    labels = _labels((0, 10, 20, 30, 40), capacity=3)
    labels[2] = (7, 1, 2, 3, 4)
    plan = CropPlan(5, 5, 10, 10, 0, 0, 0, 0, 20, 20)

    SampleNormalizer.transform_boxes(labels, plan)

    assert labels[1].tolist() == [SENTINEL_LABEL, 0, 0, 0, 0]
    assert labels[2].tolist() == [7, 1, 2, 3, 4]


def test_padding_replicates_edges():
    image = np.full((10, 10, 3), 50, dtype=np.uint8)
    image[:, 0] = 200
    # 5 pixels to the left of the image, no resize
    plan = CropPlan(x=-5, y=0, width=10, height=10, top=0, bottom=0, left=5, right=0,
                    output_width=10, output_height=10)

    out = SampleNormalizer(10, 10).crop(image, plan)

    assert out.shape == (10, 10, 3)
    assert (out[:, :6] == 200).all()
    assert (out[:, 6:] == 50).all()


def test_crop_is_resized_to_network_input():
    image = np.full((300, 400, 3), 77, dtype=np.uint8)
    plan = CropPlan(350, -20, 100, 100, 20, 0, 0, 50, 32, 48)

    out = SampleNormalizer(32, 48).crop(image, plan)

    assert out.shape == (48, 32, 3)
    assert (out == 77).all()
