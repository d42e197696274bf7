"""Unit tests for sphere intersection.

Tests cover:
- Ray hitting sphere from outside (front face)
- Ray missing sphere
- Ray starting inside sphere (back face, far root)
- Epsilon and closest-hit bounds
- Unnormalized ray directions
"""

import pytest
import taichi as ti


def _as_tuple(v):
    return (float(v[0]), float(v[1]), float(v[2]))


def _hit_sphere(origin, direction, center, radius, epsilon=0.001, closest_t=1.0e9):
    """Run hit_sphere in a kernel and return the record fields as a dict."""
    from glintpath.geometry.sphere import Sphere, hit_sphere, vec3

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f32, shape=())
    point = ti.field(dtype=ti.math.vec3, shape=())
    normal = ti.field(dtype=ti.math.vec3, shape=())
    front_face = ti.field(dtype=ti.i32, shape=())

    @ti.kernel
    def test_kernel(o: vec3, d: vec3, c: vec3, r: ti.f32, eps: ti.f32, t_max: ti.f32):
        record = hit_sphere(o, d, Sphere(center=c, radius=r), eps, t_max)
        hit[None] = record.hit
        t_val[None] = record.t
        point[None] = record.point
        normal[None] = record.normal
        front_face[None] = record.front_face

    test_kernel(vec3(*origin), vec3(*direction), vec3(*center), radius, epsilon, closest_t)
    return {
        "hit": hit[None],
        "t": t_val[None],
        "point": _as_tuple(point[None]),
        "normal": _as_tuple(normal[None]),
        "front_face": front_face[None],
    }


class TestSphereBasics:
    """Tests for the Sphere dataclass."""

    def test_sphere_fields(self):
        from glintpath.geometry.sphere import Sphere, vec3

        center_result = ti.field(dtype=ti.math.vec3, shape=())
        radius_result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            sphere = Sphere(center=vec3(1.0, 2.0, 3.0), radius=0.5)
            center_result[None] = sphere.center
            radius_result[None] = sphere.radius

        test_kernel()
        c = center_result[None]
        assert abs(c[0] - 1.0) < 1e-6
        assert abs(c[1] - 2.0) < 1e-6
        assert abs(c[2] - 3.0) < 1e-6
        assert abs(radius_result[None] - 0.5) < 1e-6


class TestSphereIntersection:
    """Tests for ray-sphere intersection."""

    def test_hit_sphere_direct_hit(self):
        """Test ray hitting sphere head-on from outside."""
        from glintpath.geometry.sphere import Sphere, hit_sphere, vec3

        hit = ti.field(dtype=ti.i32, shape=())
        t_val = ti.field(dtype=ti.f32, shape=())
        point = ti.field(dtype=ti.math.vec3, shape=())
        normal = ti.field(dtype=ti.math.vec3, shape=())
        front_face = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            # Ray from z=5 pointing toward origin
            ray_origin = vec3(0.0, 0.0, 5.0)
            ray_direction = vec3(0.0, 0.0, -1.0)
            sphere = Sphere(center=vec3(0.0, 0.0, 0.0), radius=1.0)

            record = hit_sphere(ray_origin, ray_direction, sphere, 0.001, 1000.0)
            hit[None] = record.hit
            t_val[None] = record.t
            point[None] = record.point
            normal[None] = record.normal
            front_face[None] = record.front_face

        test_kernel()
        assert hit[None] == 1
        # Should hit at z=1 (front of sphere), so t=4
        assert abs(t_val[None] - 4.0) < 1e-5
        p = point[None]
        assert abs(p[0]) < 1e-5
        assert abs(p[1]) < 1e-5
        assert abs(p[2] - 1.0) < 1e-5
        # Normal should point outward: (0, 0, 1)
        n = normal[None]
        assert abs(n[0]) < 1e-5
        assert abs(n[1]) < 1e-5
        assert abs(n[2] - 1.0) < 1e-5
        assert front_face[None] == 1

    @pytest.mark.parametrize("distance", [2.0, 4.0, 10.0, 100.0])
    def test_aimed_at_center(self, distance):
        """A ray aimed at the center from d > r hits at t = d - r."""
        rec = _hit_sphere((0.0, distance, 0.0), (0.0, -1.0, 0.0), (0.0, 0.0, 0.0), 0.5)

        assert rec["hit"] == 1
        assert abs(rec["t"] - (distance - 0.5)) < 1e-4 * distance
        # Normal parallel to point - center
        assert abs(rec["normal"][1] - 1.0) < 1e-5

    def test_hit_sphere_miss(self):
        """Test ray passing outside the sphere."""
        rec = _hit_sphere((5.0, 0.0, 0.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0)
        assert rec["hit"] == 0

    def test_miss_keeps_closest_t(self):
        rec = _hit_sphere(
            (5.0, 0.0, 0.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0, closest_t=42.0
        )
        assert rec["hit"] == 0
        assert rec["t"] == pytest.approx(42.0)

    def test_hit_sphere_inside(self):
        """A ray starting inside falls back to the far root and sees the back face."""
        rec = _hit_sphere((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), (0.0, 0.0, 0.0), 1.0)

        assert rec["hit"] == 1
        assert abs(rec["t"] - 1.0) < 1e-5
        assert rec["front_face"] == 0
        # Normal flipped to face the ray
        assert abs(rec["normal"][2] + 1.0) < 1e-5

    def test_hit_from_surface_skips_near_root(self):
        """A ray leaving the surface inward finds the far side, not itself."""
        rec = _hit_sphere((0.0, 0.0, 1.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0)

        assert rec["hit"] == 1
        assert abs(rec["t"] - 2.0) < 1e-4
        assert rec["front_face"] == 0

    def test_hit_sphere_behind_ray(self):
        """Test sphere entirely behind the ray origin."""
        rec = _hit_sphere((0.0, 0.0, 5.0), (0.0, 0.0, 1.0), (0.0, 0.0, 0.0), 1.0)
        assert rec["hit"] == 0

    def test_closest_t_rejects_farther_hit(self):
        rec = _hit_sphere(
            (0.0, 0.0, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0, closest_t=3.0
        )
        assert rec["hit"] == 0

    def test_epsilon_rejects_hits_too_close(self):
        """Both roots at or below epsilon are rejected."""
        rec = _hit_sphere(
            (0.0, 0.0, 1.5), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0, epsilon=3.0
        )
        assert rec["hit"] == 0

    def test_hit_sphere_tangent(self):
        """A ray grazing the sphere still registers a hit."""
        rec = _hit_sphere((1.0, 0.0, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0)

        assert rec["hit"] == 1
        assert abs(rec["t"] - 5.0) < 1e-3

    def test_normal_is_unit_length(self):
        rec = _hit_sphere((0.3, 0.2, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 2.0)

        n = rec["normal"]
        assert rec["hit"] == 1
        assert abs(n[0] ** 2 + n[1] ** 2 + n[2] ** 2 - 1.0) < 1e-5

    def test_unnormalized_ray_direction(self):
        """t is measured in units of the direction vector."""
        rec = _hit_sphere((0.0, 0.0, 5.0), (0.0, 0.0, -2.0), (0.0, 0.0, 0.0), 1.0)

        assert rec["hit"] == 1
        assert abs(rec["t"] - 2.0) < 1e-5
        assert abs(rec["point"][2] - 1.0) < 1e-5
