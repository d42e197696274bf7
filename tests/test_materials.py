"""Tests for the material scattering models and their dispatch.

Tests cover:
- Lambertian: directions in the normal's hemisphere, unit length
- Metal: mirror reflection, fuzz, absorption below the surface
- Glass: refraction ratio, total internal reflection, Fresnel choice
- Emissive: never scatters
- Dispatch through the uploaded material buffers

Kernels that call functions containing loops wrap the body in a
single-iteration outer loop so those inner loops run sequentially.
"""

import math

import pytest
import taichi as ti


def _vec(v):
    return (float(v[0]), float(v[1]), float(v[2]))


class TestLambertian:
    """Tests for scatter_lambertian."""

    def test_scatters_into_normal_hemisphere(self):
        from glintpath.core.rng import pixel_seed_host
        from glintpath.materials.lambertian import scatter_lambertian, vec3

        n = 64
        directions = ti.Vector.field(3, dtype=ti.f32, shape=n)
        attenuations = ti.Vector.field(3, dtype=ti.f32, shape=n)
        flags = ti.field(dtype=ti.i32, shape=n)

        @ti.kernel
        def test_kernel(seed: ti.u32):
            for _ in range(1):
                state = seed
                for k in range(n):
                    d, att, did, state = scatter_lambertian(
                        vec3(0.5, 0.4, 0.3), vec3(0.0, 1.0, 0.0), state
                    )
                    directions[k] = d
                    attenuations[k] = att
                    flags[k] = did

        test_kernel(pixel_seed_host(10, 20, 0.0))

        for k in range(n):
            d = _vec(directions[k])
            assert flags[k] == 1
            assert d[1] > 0.0
            assert abs(math.sqrt(sum(c * c for c in d)) - 1.0) < 1e-5
            assert _vec(attenuations[k]) == pytest.approx((0.5, 0.4, 0.3))

    def test_matches_host_stream(self):
        """The scattered direction is normalize(normal + unit sphere sample)."""
        from glintpath.core.rng import PixelRandom, pixel_seed_host
        from glintpath.materials.lambertian import scatter_lambertian, vec3

        result = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel(seed: ti.u32):
            for _ in range(1):
                d, att, did, state = scatter_lambertian(
                    vec3(1.0, 1.0, 1.0), vec3(0.0, 0.0, 1.0), seed
                )
                result[None] = d

        test_kernel(pixel_seed_host(7, 3, 0.0))

        p = PixelRandom(7, 3, 0.0).random_in_unit_sphere()
        raw = (p[0], p[1], p[2] + 1.0)
        length = math.sqrt(sum(c * c for c in raw))
        expected = tuple(c / length for c in raw)
        assert _vec(result[None]) == pytest.approx(expected, abs=1e-5)


class TestMetal:
    """Tests for scatter_metal."""

    def _scatter(self, incident, normal, roughness, seed=12345):
        from glintpath.materials.metal import scatter_metal, vec3

        direction = ti.Vector.field(3, dtype=ti.f32, shape=())
        attenuation = ti.Vector.field(3, dtype=ti.f32, shape=())
        did_scatter = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel(i: vec3, nrm: vec3, r: ti.f32, s: ti.u32):
            for _ in range(1):
                d, att, did, state = scatter_metal(vec3(0.8, 0.6, 0.2), r, i, nrm, s)
                direction[None] = d
                attenuation[None] = att
                did_scatter[None] = did

        test_kernel(vec3(*incident), vec3(*normal), roughness, seed)
        return _vec(direction[None]), _vec(attenuation[None]), did_scatter[None]

    def test_perfect_mirror(self):
        s = 1.0 / math.sqrt(2.0)
        direction, attenuation, did = self._scatter((s, -s, 0.0), (0.0, 1.0, 0.0), 0.0)

        assert did == 1
        assert direction == pytest.approx((s, s, 0.0), abs=1e-5)
        assert attenuation == pytest.approx((0.8, 0.6, 0.2))

    def test_fuzz_perturbs_reflection(self):
        s = 1.0 / math.sqrt(2.0)
        direction, _, _ = self._scatter((s, -s, 0.0), (0.0, 1.0, 0.0), 1.0)

        assert direction != pytest.approx((s, s, 0.0), abs=1e-3)
        assert abs(math.sqrt(sum(c * c for c in direction)) - 1.0) < 1e-5

    def test_absorbs_ray_reflected_into_surface(self):
        """A ray travelling along the normal reflects into the surface."""
        _, _, did = self._scatter((0.0, 1.0, 0.0), (0.0, 1.0, 0.0), 0.0)
        assert did == 0

    def test_grazing_reflection_absorbed(self):
        """A ray travelling parallel to the surface reflects with dot == 0."""
        _, _, did = self._scatter((1.0, 0.0, 0.0), (0.0, 1.0, 0.0), 0.0)
        assert did == 0


class TestGlass:
    """Tests for the dielectric model."""

    def test_refraction_ratio(self):
        from glintpath.materials.glass import refraction_ratio

        entering = ti.field(dtype=ti.f32, shape=())
        leaving = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            entering[None] = refraction_ratio(1.5, 1)
            leaving[None] = refraction_ratio(1.5, 0)

        test_kernel()
        assert entering[None] == pytest.approx(1.0 / 1.5)
        assert leaving[None] == pytest.approx(1.5)

    def _scatter(self, incident, normal, ior, front_face, seed):
        from glintpath.materials.glass import cannot_refract, scatter_glass, vec3

        direction = ti.Vector.field(3, dtype=ti.f32, shape=())
        final_seed = ti.field(dtype=ti.u32, shape=())
        did_scatter = ti.field(dtype=ti.i32, shape=())
        tir = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel(i: vec3, nrm: vec3, eta: ti.f32, ff: ti.i32, s: ti.u32):
            d, att, did, state = scatter_glass(vec3(1.0, 1.0, 1.0), eta, i, nrm, ff, s)
            direction[None] = d
            final_seed[None] = state
            did_scatter[None] = did
            tir[None] = cannot_refract(eta, i, nrm, ff)

        test_kernel(vec3(*incident), vec3(*normal), ior, front_face, seed)
        return _vec(direction[None]), int(final_seed[None]), did_scatter[None], tir[None]

    def test_total_internal_reflection(self):
        """Leaving glass at 60 degrees: 1.5 * sin(60) > 1 forces a reflection."""
        incident = (math.sin(math.radians(60.0)), -math.cos(math.radians(60.0)), 0.0)
        direction, seed, did, tir = self._scatter(incident, (0.0, 1.0, 0.0), 1.5, 0, 777)

        assert tir == 1
        assert did == 1
        assert direction == pytest.approx((incident[0], -incident[1], 0.0), abs=1e-5)
        # No random draw under total internal reflection
        assert seed == 777

    @pytest.mark.parametrize("angle", [30.0, 40.0, 41.0, 42.5, 45.0, 60.0])
    def test_draw_consumed_only_when_refraction_possible(self, angle):
        """Around the critical angle (~41.8 deg for ior 1.5), a random value is
        drawn exactly when cannot_refract reports no total internal reflection."""
        theta = math.radians(angle)
        incident = (math.sin(theta), -math.cos(theta), 0.0)
        _, seed, did, tir = self._scatter(incident, (0.0, 1.0, 0.0), 1.5, 0, 777)

        assert did == 1
        assert tir == (1 if angle > 41.8 else 0)
        assert (seed == 777) == (tir == 1)

    def test_normal_incidence_refracts_straight_through(self):
        """From seed 0 the draw (~0.433) exceeds the reflectance (~0.04)."""
        direction, seed, did, tir = self._scatter((0.0, -1.0, 0.0), (0.0, 1.0, 0.0), 1.5, 1, 0)

        assert tir == 0
        assert did == 1
        assert direction == pytest.approx((0.0, -1.0, 0.0), abs=1e-5)
        assert seed == 1013904223

    def test_oblique_refraction_obeys_snell(self):
        theta_i = math.radians(30.0)
        incident = (math.sin(theta_i), -math.cos(theta_i), 0.0)
        direction, _, _, _ = self._scatter(incident, (0.0, 1.0, 0.0), 1.5, 1, 0)

        # sin(theta_t) = sin(theta_i) / 1.5
        assert direction[0] == pytest.approx(math.sin(theta_i) / 1.5, abs=1e-5)
        assert direction[1] < 0.0

    def test_fresnel_reflection_when_draw_is_small(self):
        """At grazing incidence the reflectance approaches one and wins the draw."""
        theta_i = math.radians(89.9)
        incident = (math.sin(theta_i), -math.cos(theta_i), 0.0)
        direction, _, did, tir = self._scatter(incident, (0.0, 1.0, 0.0), 1.5, 1, 0)

        assert tir == 0
        assert did == 1
        assert direction[1] > 0.0


class TestEmissive:
    """Tests for scatter_emissive."""

    def test_never_scatters(self):
        from glintpath.materials.emissive import scatter_emissive, vec3

        did_scatter = ti.field(dtype=ti.i32, shape=())
        attenuation = ti.Vector.field(3, dtype=ti.f32, shape=())
        state = ti.field(dtype=ti.u32, shape=())

        @ti.kernel
        def test_kernel(seed: ti.u32):
            d, att, did, new_seed = scatter_emissive(vec3(0.9, 0.8, 0.7), seed)
            did_scatter[None] = did
            attenuation[None] = att
            state[None] = new_seed

        test_kernel(12345)
        assert did_scatter[None] == 0
        assert state[None] == 12345
        assert _vec(attenuation[None]) == pytest.approx((0.9, 0.8, 0.7))


class TestScatterDispatch:
    """Tests for scatter() reading the material buffers."""

    def _upload(self):
        from glintpath.scene import Material, Scene, upload_scene

        scene = Scene()
        scene.add_material(Material.lambertian((0.5, 0.5, 0.5)))
        scene.add_material(Material.metal((0.8, 0.8, 0.8), roughness=0.0))
        scene.add_material(Material.glass(ior=1.52))
        scene.add_material(Material.emissive((3.0, 2.0, 1.0), color=(0.2, 0.2, 0.2)))
        scene.add_sphere((0.0, 0.0, 0.0), 1.0, 0)
        upload_scene(scene)

    def _dispatch(self, material_index, incident=(0.0, -1.0, 0.0)):
        from glintpath.core.ray import make_ray
        from glintpath.geometry.hit import HitRecord
        from glintpath.materials.scatter import emitted, scatter, vec3

        attenuation = ti.Vector.field(3, dtype=ti.f32, shape=())
        origin = ti.Vector.field(3, dtype=ti.f32, shape=())
        direction = ti.Vector.field(3, dtype=ti.f32, shape=())
        did_scatter = ti.field(dtype=ti.i32, shape=())
        emission = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel(mat: ti.i32, i: vec3):
            for _ in range(1):
                rec = HitRecord(
                    hit=1,
                    t=1.0,
                    point=vec3(0.0, 1.0, 0.0),
                    normal=vec3(0.0, 1.0, 0.0),
                    front_face=1,
                    material_index=mat,
                    object_index=0,
                )
                att, scattered, did, state = scatter(
                    make_ray(vec3(0.0, 2.0, 0.0), i), rec, ti.cast(0, ti.u32)
                )
                attenuation[None] = att
                origin[None] = scattered.origin
                direction[None] = scattered.direction
                did_scatter[None] = did
                emission[None] = emitted(mat)

        test_kernel(material_index, vec3(*incident))
        return {
            "attenuation": _vec(attenuation[None]),
            "origin": _vec(origin[None]),
            "direction": _vec(direction[None]),
            "did_scatter": did_scatter[None],
            "emission": _vec(emission[None]),
        }

    def test_lambertian_dispatch(self):
        self._upload()
        out = self._dispatch(0)

        assert out["did_scatter"] == 1
        assert out["attenuation"] == pytest.approx((0.5, 0.5, 0.5))
        assert out["origin"] == pytest.approx((0.0, 1.0, 0.0))
        assert out["direction"][1] > 0.0
        assert out["emission"] == pytest.approx((0.0, 0.0, 0.0))

    def test_metal_dispatch(self):
        self._upload()
        s = 1.0 / math.sqrt(2.0)
        out = self._dispatch(1, incident=(s, -s, 0.0))

        assert out["did_scatter"] == 1
        assert out["direction"] == pytest.approx((s, s, 0.0), abs=1e-5)

    def test_glass_dispatch(self):
        self._upload()
        out = self._dispatch(2)

        assert out["did_scatter"] == 1
        assert out["attenuation"] == pytest.approx((1.0, 1.0, 1.0))

    def test_emissive_dispatch(self):
        self._upload()
        out = self._dispatch(3)

        assert out["did_scatter"] == 0
        assert out["emission"] == pytest.approx((3.0, 2.0, 1.0))
        assert out["attenuation"] == pytest.approx((0.2, 0.2, 0.2))

    def test_unknown_type_absorbs(self):
        from glintpath.scene.buffers import material_types

        self._upload()
        material_types[0] = 99
        out = self._dispatch(0)

        assert out["did_scatter"] == 0

    def test_attenuation_and_emission_non_negative(self):
        self._upload()
        for index in range(4):
            out = self._dispatch(index)
            assert all(c >= 0.0 for c in out["attenuation"])
            assert all(c >= 0.0 for c in out["emission"])
