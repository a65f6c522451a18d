import numpy
from scipy.spatial.transform import Rotation

from nearest_blend_shape.utils import conversion


# Euler angles follow the editor convention, rotating around the world z,
# x and y axis in that order.
EULER_ORDER = "zxy"


def as_homogeneous(points):
    """
    :param numpy.Array points:
    :return: Homogeneous points
    :rtype: numpy.Array
    """
    return numpy.hstack((points, numpy.ones((len(points), 1))))


def local_to_world(matrix, points):
    """
    Transform local points into world space using a 4x4 placement matrix
    that uses the row vector convention, translation is stored in the last
    row.

    :param numpy.Array matrix:
    :param list/numpy.Array points:
    :return: World points
    :rtype: numpy.Array
    """
    points = conversion.as_points(points)
    return numpy.dot(as_homogeneous(points), matrix)[:, :3]


def world_to_local(matrix, points):
    """
    :param numpy.Array matrix:
    :param list/numpy.Array points:
    :return: Local points
    :rtype: numpy.Array
    """
    points = conversion.as_points(points)
    return numpy.dot(as_homogeneous(points), numpy.linalg.inv(matrix))[:, :3]


class SearchTransform(object):
    """
    The search transform nudges world positions before they are used to
    find the nearest source point. It compensates for systematic offsets
    between the rest pose of the source and target meshes. The offset is
    added first, the result is rotated around the world origin and finally
    scaled around the world origin. The order is fixed so the offset
    behaves as a world space nudge regardless of the rotation and scale.
    """
    def __init__(self, offset=(0, 0, 0), rotation=(0, 0, 0), scale=(1, 1, 1)):
        self._offset = numpy.zeros(3)
        self._rotation = numpy.zeros(3)
        self._scale = numpy.ones(3)

        self.set_offset(offset)
        self.set_rotation(rotation)
        self.set_scale(scale)

    def __repr__(self):
        return "{}(offset={}, rotation={}, scale={})".format(
            self.__class__.__name__,
            self._offset.tolist(),
            self._rotation.tolist(),
            self._scale.tolist()
        )

    # ------------------------------------------------------------------------

    @property
    def offset(self):
        """
        :return: Offset
        :rtype: numpy.Array
        """
        return self._offset.copy()

    def set_offset(self, offset):
        """
        :param list/tuple/numpy.Array offset:
        :raise TypeError: When offset is not a sequence of numbers.
        :raise ValueError: When offset is not a finite 3D vector.
        """
        self._offset = conversion.as_vector(offset, "search offset")

    @property
    def rotation(self):
        """
        :return: Rotation in degrees
        :rtype: numpy.Array
        """
        return self._rotation.copy()

    def set_rotation(self, rotation):
        """
        :param list/tuple/numpy.Array rotation: Euler angles in degrees.
        :raise TypeError: When rotation is not a sequence of numbers.
        :raise ValueError: When rotation is not a finite 3D vector.
        """
        self._rotation = conversion.as_vector(rotation, "search rotation")

    @property
    def scale(self):
        """
        :return: Scale
        :rtype: numpy.Array
        """
        return self._scale.copy()

    def set_scale(self, scale):
        """
        :param list/tuple/numpy.Array scale:
        :raise TypeError: When scale is not a sequence of numbers.
        :raise ValueError: When scale is not a finite 3D vector.
        :raise ValueError: When any of the scale components is 0.
        """
        scale = conversion.as_vector(scale, "search scale")
        if numpy.any(scale == 0.0):
            raise ValueError("Search scale components are not allowed to be 0.0.")

        self._scale = scale

    def reset(self):
        self._offset = numpy.zeros(3)
        self._rotation = numpy.zeros(3)
        self._scale = numpy.ones(3)

    def is_identity(self):
        """
        :return: Identity state
        :rtype: bool
        """
        return bool(
            not numpy.any(self._offset)
            and not numpy.any(self._rotation)
            and numpy.all(self._scale == 1.0)
        )

    # ------------------------------------------------------------------------

    def get_rotation(self):
        """
        :return: Rotation
        :rtype: scipy.spatial.transform.Rotation
        """
        x, y, z = self._rotation
        return Rotation.from_euler(EULER_ORDER, [z, x, y], degrees=True)

    def apply(self, points):
        """
        :param list/numpy.Array points: Single point or (N, 3) points.
        :return: Transformed points
        :rtype: numpy.Array
        """
        points = numpy.array(points, dtype=float)
        points = points + self._offset
        if numpy.any(self._rotation):
            points = self.get_rotation().apply(points)

        return points * self._scale


class CoordinateBridge(object):
    """
    The coordinate bridge converts target local positions into the local
    space of the source mesh, applying the search transform while the
    positions are in world space. The conversions between local and world
    space are provided by the host and treated as opaque functions that
    accept and return (N, 3) points.

    :param callable/None target_to_world:
    :param callable/None world_to_source:
    :param SearchTransform/None search_transform:
    """
    def __init__(self, target_to_world=None, world_to_source=None, search_transform=None):
        self.target_to_world = target_to_world or conversion.as_points
        self.world_to_source = world_to_source or conversion.as_points
        self.search_transform = search_transform or SearchTransform()

    @classmethod
    def from_meshes(cls, source_mesh, target_mesh, search_transform=None):
        """
        :param nearest_blend_shape.mesh.Mesh source_mesh:
        :param nearest_blend_shape.mesh.Mesh target_mesh:
        :param SearchTransform/None search_transform:
        :return: Coordinate bridge
        :rtype: CoordinateBridge
        """
        return cls(target_mesh.local_to_world, source_mesh.world_to_local, search_transform)

    def to_source(self, points):
        """
        :param list/numpy.Array points: Target local points.
        :return: Source local points
        :rtype: numpy.Array
        """
        world_points = self.target_to_world(conversion.as_points(points, "target points"))
        world_points = self.search_transform.apply(world_points)
        return conversion.as_points(self.world_to_source(world_points), "query points")
