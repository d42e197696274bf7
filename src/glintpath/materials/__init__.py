"""Materials module for surface scattering models.

Components:
    lambertian: Ideal diffuse reflection
    metal: Mirror reflection with roughness fuzz
    glass: Dielectric refraction with Schlick Fresnel blending
    emissive: Light sources that terminate paths
    scatter: Dispatch on the material type of a hit

Every scattering function takes and returns the PRNG state explicitly and
returns (direction, attenuation, did_scatter, seed). All of them are Taichi
functions inlined into the per-pixel kernels.
"""

from .emissive import scatter_emissive
from .glass import cannot_refract, refraction_ratio, scatter_glass
from .lambertian import scatter_lambertian
from .metal import scatter_metal
from .scatter import emitted, scatter

__all__ = [
    "scatter_lambertian",
    "scatter_metal",
    "scatter_glass",
    "refraction_ratio",
    "cannot_refract",
    "scatter_emissive",
    "scatter",
    "emitted",
]
