"""
Tests for landmark vector math
"""
import pytest

from bodyscan.models.schemas import LandmarkPoint
from bodyscan.utils.geometry import PoseLandmark, distance, is_live, landmark, midpoint
from tests.conftest import make_skeleton


class TestDistance:

    def test_zero_for_same_point(self, front_skeleton):
        for point in front_skeleton:
            assert distance(point, point) == 0

    def test_symmetric(self, front_skeleton):
        for p1 in front_skeleton[:13]:
            for p2 in front_skeleton[11:29]:
                assert distance(p1, p2) == distance(p2, p1)

    def test_uses_depth(self):
        p1 = LandmarkPoint(x=0, y=0, z=0)
        p2 = LandmarkPoint(x=1, y=2, z=2)
        assert distance(p1, p2) == pytest.approx(3.0)

    def test_depth_only(self):
        assert distance(LandmarkPoint(x=0.5, y=0.5, z=-0.2), LandmarkPoint(x=0.5, y=0.5, z=0.3)) == pytest.approx(0.5)


class TestMidpoint:

    def test_coordinates_are_averaged(self):
        mid = midpoint(LandmarkPoint(x=-0.1, y=0.2, z=0.4), LandmarkPoint(x=0.1, y=0.4, z=0.0))
        assert (mid.x, mid.y, mid.z) == pytest.approx((0.0, 0.3, 0.2))

    @pytest.mark.parametrize("v1, v2, expected", [
        (0.3, 0.8, 0.3),
        (0.9, 0.2, 0.2),
        (0.0, 1.0, 0.0),
        (None, 0.4, 0.4),
        (0.6, None, 0.6),
        (None, None, 1.0),
    ])
    def test_visibility_is_minimum(self, v1, v2, expected):
        p1 = LandmarkPoint(x=0, y=0, z=0, visibility=v1)
        p2 = LandmarkPoint(x=1, y=1, z=1, visibility=v2)
        assert midpoint(p1, p2).visibility == expected


class TestLiveness:

    def test_empty_skeleton_is_not_live(self):
        assert not is_live([])
        assert not is_live(None)

    def test_any_landmark_is_live(self):
        assert is_live([LandmarkPoint(x=0.5, y=0.5, z=0, visibility=0.01)])

    def test_full_skeleton_is_live(self, front_skeleton):
        assert is_live(front_skeleton)


class TestLandmarkLookup:

    def test_returns_indexed_point(self, front_skeleton):
        assert landmark(front_skeleton, PoseLandmark.LEFT_ANKLE).y == 1.0

    def test_short_skeleton_raises(self):
        skeleton = make_skeleton()[:12]
        with pytest.raises(IndexError, match="LEFT_HIP"):
            landmark(skeleton, PoseLandmark.LEFT_HIP)

    def test_index_table(self):
        assert PoseLandmark.NOSE == 0
        assert (PoseLandmark.LEFT_SHOULDER, PoseLandmark.RIGHT_SHOULDER) == (11, 12)
        assert (PoseLandmark.LEFT_HIP, PoseLandmark.RIGHT_HIP) == (23, 24)
        assert (PoseLandmark.LEFT_ANKLE, PoseLandmark.RIGHT_ANKLE) == (27, 28)
        assert len(PoseLandmark) == 33
        assert len(make_skeleton()) == 33
