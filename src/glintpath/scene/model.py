"""Host-side scene data model.

A Scene owns an ordered sequence of materials and an ordered sequence of
objects. Objects refer to materials by index, and an object's index in the
scene is its identity. Both sequences are append-only while the scene is
being built and become read-only once the scene is frozen (which happens
automatically when it is uploaded for rendering).

The numeric core never sees these classes directly; upload_scene() in
glintpath.scene.buffers flattens them into Taichi fields.

Example:
    >>> from glintpath.scene.model import Material, Scene
    >>> scene = Scene()
    >>> ground = scene.add_material(Material.lambertian((0.5, 0.5, 0.5)))
    >>> glass = scene.add_material(Material.glass(ior=1.52))
    >>> scene.add_plane((0.0, -0.5, 0.0), ground)
    0
    >>> scene.add_sphere((0.0, 0.0, 0.0), 0.5, glass)
    1
"""

import math
from dataclasses import dataclass, field, replace
from enum import IntEnum
from typing import Any

import numpy as np
import numpy.typing as npt

Color = tuple[float, float, float]
Vector3 = tuple[float, float, float]
Matrix3 = tuple[Vector3, Vector3, Vector3]

IDENTITY_ROTATION: Matrix3 = ((1.0, 0.0, 0.0), (0.0, 1.0, 0.0), (0.0, 0.0, 1.0))

# Max deviation of R @ R.T from identity and of det(R) from 1
ROTATION_TOLERANCE = 1e-6


class MaterialType(IntEnum):
    """Material response models, with the integer tags used by the kernels."""

    LAMBERTIAN = 0
    METAL = 1
    GLASS = 2
    EMISSIVE = 3


class ObjectKind(IntEnum):
    """Primitive kinds, with the integer tags used by the kernels.

    BOX is reserved in the flattened layout but cannot be rendered yet.
    """

    SPHERE = 0
    BOX = 1
    PLANE = 2


def _as_triple(values: Any, name: str) -> tuple[float, float, float]:
    if len(values) != 3:
        raise ValueError(f"{name} must have exactly 3 components, got {len(values)}")
    return (float(values[0]), float(values[1]), float(values[2]))


def _check_non_negative(values: Color, name: str) -> None:
    for i, component in enumerate(values):
        if component < 0.0:
            raise ValueError(f"{name} component {i} = {component} is negative")


@dataclass(frozen=True)
class Material:
    """Surface material.

    Attributes:
        type: The response model.
        base_color: Attenuation applied on scatter. Channels above 1 are
            allowed and amplify light.
        metallic: Metallic factor, carried in the flattened buffer.
        roughness: Fuzz radius for metals, in [0, 1].
        ior: Refractive index for glass (> 0).
        emission: Emitted radiance added when a path hits the surface.
        name: Optional label.
    """

    type: MaterialType
    base_color: Color = (1.0, 1.0, 1.0)
    metallic: float = 0.0
    roughness: float = 0.0
    ior: float = 1.0
    emission: Color = (0.0, 0.0, 0.0)
    name: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "type", MaterialType(self.type))
        object.__setattr__(self, "base_color", _as_triple(self.base_color, "base_color"))
        object.__setattr__(self, "emission", _as_triple(self.emission, "emission"))
        _check_non_negative(self.base_color, "base_color")
        _check_non_negative(self.emission, "emission")
        if not 0.0 <= self.roughness <= 1.0:
            raise ValueError(f"roughness = {self.roughness} is outside [0, 1]")
        if not self.ior > 0.0:
            raise ValueError(f"ior = {self.ior} must be positive")

    @classmethod
    def lambertian(cls, color: Color, name: str = "") -> "Material":
        """Create an ideal diffuse material."""
        return cls(MaterialType.LAMBERTIAN, base_color=color, roughness=1.0, name=name)

    @classmethod
    def metal(cls, color: Color, roughness: float = 0.0, name: str = "") -> "Material":
        """Create a reflective metal; roughness 0 is a perfect mirror."""
        return cls(
            MaterialType.METAL,
            base_color=color,
            metallic=1.0,
            roughness=roughness,
            name=name,
        )

    @classmethod
    def glass(
        cls,
        ior: float = 1.5,
        color: Color = (1.0, 1.0, 1.0),
        name: str = "",
    ) -> "Material":
        """Create a dielectric with Fresnel-blended reflection and refraction."""
        return cls(MaterialType.GLASS, base_color=color, ior=ior, name=name)

    @classmethod
    def emissive(
        cls,
        emission: Color,
        color: Color = (1.0, 1.0, 1.0),
        name: str = "",
    ) -> "Material":
        """Create a light-emitting material that terminates paths."""
        return cls(MaterialType.EMISSIVE, base_color=color, emission=emission, name=name)

    def to_dict(self) -> dict[str, Any]:
        """Export the material as a JSON-friendly dictionary."""
        return {
            "type": self.type.name.lower(),
            "base_color": list(self.base_color),
            "metallic": self.metallic,
            "roughness": self.roughness,
            "ior": self.ior,
            "emission": list(self.emission),
            "name": self.name,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Material":
        """Load a material from a dictionary produced by to_dict()."""
        type_name = str(data.get("type", "")).upper()
        if type_name not in MaterialType.__members__:
            raise ValueError(f"Unknown material type: {data.get('type')}")
        return cls(
            MaterialType[type_name],
            base_color=data.get("base_color", (1.0, 1.0, 1.0)),
            metallic=data.get("metallic", 0.0),
            roughness=data.get("roughness", 0.0),
            ior=data.get("ior", 1.0),
            emission=data.get("emission", (0.0, 0.0, 0.0)),
            name=data.get("name", ""),
        )


def rotation_matrix(axis: Vector3, degrees: float) -> Matrix3:
    """Build a rotation about an arbitrary axis (Rodrigues' formula).

    Args:
        axis: Rotation axis; does not need to be unit length.
        degrees: Rotation angle in degrees, counter-clockwise about axis.

    Returns:
        The 3x3 rotation as nested tuples.

    Raises:
        ValueError: If axis has zero length.
    """
    k = np.asarray(axis, dtype=np.float64)
    norm = np.linalg.norm(k)
    if norm == 0.0:
        raise ValueError("Rotation axis must be non-zero")
    k = k / norm
    theta = math.radians(degrees)
    cross = np.array(
        [
            [0.0, -k[2], k[1]],
            [k[2], 0.0, -k[0]],
            [-k[1], k[0], 0.0],
        ]
    )
    rot = np.eye(3) + math.sin(theta) * cross + (1.0 - math.cos(theta)) * (cross @ cross)
    return tuple(tuple(float(x) for x in row) for row in rot)  # type: ignore[return-value]


def _check_rotation(rot: npt.NDArray[np.float64]) -> None:
    if rot.shape != (3, 3):
        raise ValueError(f"rotation must be 3x3, got shape {rot.shape}")
    if not np.all(np.isfinite(rot)):
        raise ValueError("rotation contains non-finite values")
    if not np.allclose(rot @ rot.T, np.eye(3), atol=ROTATION_TOLERANCE):
        raise ValueError("rotation must be orthonormal (no scale or shear)")
    det = float(np.linalg.det(rot))
    if abs(det - 1.0) > ROTATION_TOLERANCE:
        raise ValueError(f"rotation determinant = {det:.6f}; reflections are not allowed")


@dataclass(frozen=True)
class SceneObject:
    """A primitive placed in the scene.

    Objects are immutable; Scene.add_object() stores a copy carrying the
    assigned id.

    Attributes:
        kind: Primitive kind.
        material_index: Index of the object's material in the scene.
        position: World-space translation (sphere center, plane point).
        rotation: 3x3 proper rotation (orthonormal, determinant +1). For
            planes the rotated +Y axis is the normal.
        radius: Sphere radius; ignored for planes.
        id: Index in the owning scene, assigned by Scene.add_object().
    """

    kind: ObjectKind
    material_index: int
    position: Vector3 = (0.0, 0.0, 0.0)
    rotation: Matrix3 = IDENTITY_ROTATION
    radius: float = 0.0
    id: int = -1

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", ObjectKind(self.kind))
        object.__setattr__(self, "position", _as_triple(self.position, "position"))
        rot = np.asarray(self.rotation, dtype=np.float64)
        _check_rotation(rot)
        object.__setattr__(
            self, "rotation", tuple(tuple(float(x) for x in row) for row in rot)
        )
        if self.kind == ObjectKind.SPHERE and not self.radius > 0.0:
            raise ValueError(f"Sphere radius = {self.radius} must be positive")

    @classmethod
    def sphere(cls, center: Vector3, radius: float, material_index: int) -> "SceneObject":
        """Create a sphere at center."""
        return cls(ObjectKind.SPHERE, material_index, position=center, radius=radius)

    @classmethod
    def plane(
        cls,
        point: Vector3,
        material_index: int,
        rotation: Matrix3 = IDENTITY_ROTATION,
    ) -> "SceneObject":
        """Create an infinite plane through point; unrotated planes face +Y."""
        return cls(ObjectKind.PLANE, material_index, position=point, rotation=rotation)

    def model_matrix(self) -> npt.NDArray[np.float64]:
        """Return translate(position) * rotation as a 4x4 matrix."""
        model = np.eye(4)
        model[:3, :3] = np.asarray(self.rotation)
        model[:3, 3] = self.position
        return model

    def inverse_model_matrix(self) -> npt.NDArray[np.float64]:
        """Return the inverse of model_matrix()."""
        return np.linalg.inv(self.model_matrix())

    def normal(self) -> Vector3:
        """Return the rotated +Y axis (the plane normal)."""
        n = np.asarray(self.rotation) @ np.array([0.0, 1.0, 0.0])
        n = n / np.linalg.norm(n)
        return (float(n[0]), float(n[1]), float(n[2]))

    def to_dict(self) -> dict[str, Any]:
        """Export the object as a JSON-friendly dictionary."""
        data: dict[str, Any] = {
            "kind": self.kind.name.lower(),
            "material_index": self.material_index,
            "position": list(self.position),
            "rotation": [list(row) for row in self.rotation],
        }
        if self.kind == ObjectKind.SPHERE:
            data["radius"] = self.radius
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SceneObject":
        """Load an object from a dictionary produced by to_dict()."""
        kind_name = str(data.get("kind", "")).upper()
        if kind_name not in ObjectKind.__members__:
            raise ValueError(f"Unknown object kind: {data.get('kind')}")
        return cls(
            ObjectKind[kind_name],
            int(data.get("material_index", 0)),
            position=data.get("position", (0.0, 0.0, 0.0)),
            rotation=data.get("rotation", IDENTITY_ROTATION),
            radius=data.get("radius", 0.0),
        )


@dataclass
class Scene:
    """Ordered materials and objects making up a renderable scene.

    Freezing converts both sequences to tuples, so a frozen scene cannot be
    changed through add_*() or by editing the sequences in place.

    Attributes:
        materials: Materials in insertion order; index is the material id.
        objects: Objects in insertion order; index is the object id.
    """

    materials: list[Material] = field(default_factory=list)
    objects: list[SceneObject] = field(default_factory=list)
    _frozen: bool = field(default=False, repr=False)

    @property
    def frozen(self) -> bool:
        """Whether the scene has been frozen for rendering."""
        return self._frozen

    def freeze(self) -> None:
        """Validate the scene and make it read-only."""
        self.validate()
        self.materials = tuple(self.materials)  # type: ignore[assignment]
        self.objects = tuple(self.objects)  # type: ignore[assignment]
        self._frozen = True

    def _check_mutable(self) -> None:
        if self._frozen:
            raise RuntimeError("Scene is frozen; build a new Scene to change it")

    def add_material(self, material: Material) -> int:
        """Append a material and return its index."""
        self._check_mutable()
        self.materials.append(material)
        return len(self.materials) - 1

    def add_object(self, obj: SceneObject) -> int:
        """Append an object and return its index.

        Raises:
            RuntimeError: If the scene is frozen.
            ValueError: If the material index is out of range or the object
                kind is not renderable.
        """
        self._check_mutable()
        self._check_object(obj)
        obj = replace(obj, id=len(self.objects))
        self.objects.append(obj)
        return obj.id

    def add_sphere(self, center: Vector3, radius: float, material_index: int) -> int:
        """Append a sphere and return its index."""
        return self.add_object(SceneObject.sphere(center, radius, material_index))

    def add_plane(
        self,
        point: Vector3,
        material_index: int,
        rotation: Matrix3 = IDENTITY_ROTATION,
    ) -> int:
        """Append an infinite plane and return its index."""
        return self.add_object(SceneObject.plane(point, material_index, rotation))

    def _check_object(self, obj: SceneObject) -> None:
        if obj.kind == ObjectKind.BOX:
            raise ValueError("Box objects are reserved and not supported")
        if not 0 <= obj.material_index < len(self.materials):
            raise ValueError(
                f"Invalid material_index {obj.material_index}: "
                f"scene has {len(self.materials)} materials"
            )

    def validate(self) -> None:
        """Check that every object references an existing material.

        Raises:
            ValueError: On the first invalid object.
        """
        for obj in self.objects:
            self._check_object(obj)

    def to_dict(self) -> dict[str, Any]:
        """Export the scene as a JSON-friendly dictionary."""
        return {
            "materials": [m.to_dict() for m in self.materials],
            "objects": [o.to_dict() for o in self.objects],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Scene":
        """Load a scene from a dictionary with 'materials' and 'objects' keys.

        Raises:
            ValueError: If the data contains unknown types or invalid values.
        """
        scene = cls()
        for mat_data in data.get("materials", []):
            scene.add_material(Material.from_dict(mat_data))
        for obj_data in data.get("objects", []):
            scene.add_object(SceneObject.from_dict(obj_data))
        return scene
