"""Unit tests for scene-level intersection.

Tests cover:
- SceneHitRecord with material_id
- Sphere storage and clearing
- Closest hit selection across several spheres
- Tie-breaking by insertion order
- Empty scenes
"""

import pytest
import taichi as ti


def _intersect(origin, direction, t_min=0.001, t_max=1e10):
    """Run intersect_scene once against the uploaded spheres."""
    from spheretrace.scene.intersection import intersect_scene, vec3

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f32, shape=())
    material_id = ti.field(dtype=ti.i32, shape=())

    @ti.kernel
    def test_kernel(
        ox: ti.f32, oy: ti.f32, oz: ti.f32,
        dx: ti.f32, dy: ti.f32, dz: ti.f32,
        t_lo: ti.f32, t_hi: ti.f32,
    ):
        rec = intersect_scene(vec3(ox, oy, oz), vec3(dx, dy, dz), t_lo, t_hi)
        hit[None] = rec.hit
        t_val[None] = rec.t
        material_id[None] = rec.material_id

    test_kernel(*origin, *direction, t_min, t_max)
    return hit[None], t_val[None], material_id[None]


class TestSceneHitRecordBasics:
    """Tests for SceneHitRecord dataclass."""

    def test_scene_hit_record_has_material_id(self):
        """Test that SceneHitRecord includes material_id field."""
        from spheretrace.scene.intersection import SceneHitRecord, vec3

        result_material_id = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            rec = SceneHitRecord(
                hit=1,
                t=5.0,
                point=vec3(0.0, 0.0, 0.0),
                normal=vec3(0.0, 0.0, 1.0),
                front_face=1,
                material_id=42,
            )
            result_material_id[None] = rec.material_id

        test_kernel()
        assert result_material_id[None] == 42

    def test_miss_record_has_negative_material_id(self):
        """Test that miss records have material_id = -1."""
        from spheretrace.scene.intersection import _make_miss_record

        result_hit = ti.field(dtype=ti.i32, shape=())
        result_material_id = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            rec = _make_miss_record()
            result_hit[None] = rec.hit
            result_material_id[None] = rec.material_id

        test_kernel()
        assert result_hit[None] == 0
        assert result_material_id[None] == -1


class TestSphereStorage:
    """Tests for sphere field storage."""

    def test_add_sphere(self):
        """Test adding a sphere to the scene."""
        from spheretrace.scene.intersection import (
            add_sphere,
            get_sphere_count,
            sphere_material_ids,
            sphere_radii,
        )

        assert get_sphere_count() == 0
        idx = add_sphere((1.0, 2.0, 3.0), 0.5, material_id=1)
        assert idx == 0
        assert get_sphere_count() == 1
        assert abs(sphere_radii[0] - 0.5) < 1e-6
        assert sphere_material_ids[0] == 1

    def test_clear_scene(self):
        """Test clearing all spheres from the scene."""
        from spheretrace.scene.intersection import add_sphere, clear_scene, get_sphere_count

        add_sphere((0.0, 0.0, -1.0), 0.5)
        add_sphere((0.0, 0.0, -2.0), 0.5)
        assert get_sphere_count() == 2

        clear_scene()
        assert get_sphere_count() == 0

    def test_capacity_exceeded(self):
        """Test adding past MAX_SPHERES raises RuntimeError."""
        from spheretrace.scene import intersection

        intersection.num_spheres[None] = intersection.MAX_SPHERES
        with pytest.raises(RuntimeError, match="Maximum number of spheres"):
            intersection.add_sphere((0.0, 0.0, 0.0), 1.0)


class TestIntersectScene:
    """Tests for nearest-hit queries."""

    def test_empty_scene_misses(self):
        """Test an empty scene never reports a hit."""
        hit, _, material_id = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert hit == 0
        assert material_id == -1

    def test_single_sphere(self):
        """Test a single sphere hit reports its material."""
        from spheretrace.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, -3.0), 1.0, material_id=7)
        hit, t, material_id = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))

        assert hit == 1
        assert abs(t - 2.0) < 1e-5
        assert material_id == 7

    @pytest.mark.parametrize("near_first", [True, False])
    def test_closest_hit_wins_regardless_of_order(self, near_first):
        """Test the nearest sphere wins whichever order spheres were added in."""
        from spheretrace.scene.intersection import add_sphere

        if near_first:
            add_sphere((0.0, 0.0, -3.0), 1.0, material_id=1)
            add_sphere((0.0, 0.0, -10.0), 1.0, material_id=2)
        else:
            add_sphere((0.0, 0.0, -10.0), 1.0, material_id=2)
            add_sphere((0.0, 0.0, -3.0), 1.0, material_id=1)

        hit, t, material_id = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert hit == 1
        assert abs(t - 2.0) < 1e-5
        assert material_id == 1

    def test_equal_distance_keeps_first_sphere(self):
        """Test a later sphere at exactly the same distance does not replace the first."""
        from spheretrace.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, -3.0), 1.0, material_id=4)
        add_sphere((0.0, 0.0, -3.0), 1.0, material_id=5)

        hit, t, material_id = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert hit == 1
        assert abs(t - 2.0) < 1e-5
        assert material_id == 4

    def test_t_max_limits_search(self):
        """Test spheres beyond t_max are ignored."""
        from spheretrace.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, -10.0), 1.0, material_id=3)
        hit, _, _ = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), t_max=5.0)
        assert hit == 0

    def test_degenerate_sphere_is_skipped(self):
        """Test a zero-radius sphere in front of a real one is ignored."""
        from spheretrace.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, -1.0), 0.0, material_id=8)
        add_sphere((0.0, 0.0, -5.0), 1.0, material_id=9)

        hit, t, material_id = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert hit == 1
        assert abs(t - 4.0) < 1e-5
        assert material_id == 9
