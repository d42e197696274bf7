"""Taichi path tracer for small scenes of implicit surfaces.

This package renders a scene by tracing one path per pixel per frame with
a deterministic per-pixel random stream, supporting:
- Sphere and infinite plane primitives
- Lambertian, metal, glass (Fresnel blended) and emissive materials
- A bounded bounce loop with a sky gradient background
- Gamma encoding for display

Subpackages:
    core: Rays, PRNG, tone mapping, the path integrator and frame renderer
    geometry: Hit records and primitive intersection routines
    materials: Material scattering models and dispatch
    scene: Scene data model, flattened buffers and closest-hit queries
    camera: Frame parameters and primary ray generation
    preview: RGBA assembly and optional Matplotlib preview
"""

__version__ = "0.1.0"
