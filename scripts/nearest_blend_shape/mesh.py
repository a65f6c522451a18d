"""
Host independent mesh data. A mesh stores its object space points, the
matrix that places it in the world and its blend shape channels. The same
classes are used to feed the transfer and to receive its output, a host
converts them from and into its own scene representation.
"""
import collections
import numpy

from nearest_blend_shape import space
from nearest_blend_shape.utils import conversion


class BlendShapeFrame(collections.namedtuple("BlendShapeFrame", "weight deltas normals tangents")):
    """
    A weighted snapshot of per vertex deltas. The normal and tangent deltas
    are carried along for the host but never calculated.
    """
    __slots__ = ()

    @classmethod
    def create(cls, weight, deltas, normals=None, tangents=None):
        """
        :param float weight:
        :param list/numpy.Array deltas:
        :param list/numpy.Array/None normals:
        :param list/numpy.Array/None tangents:
        :return: Frame
        :rtype: BlendShapeFrame
        :raise ValueError: When the normal or tangent count doesn't match the deltas.
        """
        deltas = conversion.as_points(deltas, "vertex deltas")
        normals = numpy.zeros(deltas.shape) if normals is None else conversion.as_points(normals, "normal deltas")
        tangents = numpy.zeros(deltas.shape) if tangents is None else conversion.as_points(tangents, "tangent deltas")

        if normals.shape != deltas.shape or tangents.shape != deltas.shape:
            raise ValueError("Normal and tangent deltas should match the vertex delta count of {}.".format(len(deltas)))

        return cls(float(weight), deltas, normals, tangents)


class BlendShapeChannel(object):
    """
    A named blend shape with one or more frames, the frames are kept in
    order of increasing weight.

    :param str name:
    :param list[BlendShapeFrame] frames:
    """
    def __init__(self, name, frames=()):
        self._name = name
        self._frames = []

        for frame in frames:
            self.add_frame(frame)

    def __repr__(self):
        return "{}(name={!r}, frames={})".format(self.__class__.__name__, self._name, len(self._frames))

    @property
    def name(self):
        """
        :return: Name
        :rtype: str
        """
        return self._name

    @property
    def frames(self):
        """
        :return: Frames
        :rtype: list[BlendShapeFrame]
        """
        return list(self._frames)

    def add_frame(self, frame):
        """
        :param BlendShapeFrame frame:
        :raise ValueError: When the frame weight doesn't exceed the last frame.
        """
        if self._frames and frame.weight <= self._frames[-1].weight:
            raise ValueError("Frame weight {} of channel '{}' should exceed the previous weight {}.".format(
                frame.weight, self._name, self._frames[-1].weight
            ))

        self._frames.append(frame)

    def get_frame(self):
        """
        :return: Highest weight frame
        :rtype: BlendShapeFrame
        :raise RuntimeError: When the channel contains no frames.
        """
        if not self._frames:
            raise RuntimeError("Blend shape channel '{}' doesn't contain any frames.".format(self._name))

        return self._frames[-1]


class Mesh(object):
    """
    :param str name:
    :param list/numpy.Array points: Object space points.
    :param list/numpy.Array/None matrix: 4x4 world matrix, row vector convention.
    :param list[BlendShapeChannel] channels:
    """
    def __init__(self, name, points, matrix=None, channels=()):
        self._name = name
        self._points = conversion.as_points(points, "mesh points")
        self._matrix = numpy.identity(4)
        self._channels = collections.OrderedDict()

        if matrix is not None:
            self.set_matrix(matrix)

        for channel in channels:
            self.add_channel(channel)

    def __repr__(self):
        return "{}(name={!r}, vertices={}, channels={})".format(
            self.__class__.__name__,
            self._name,
            self.num_vertices,
            self.channel_names
        )

    # ------------------------------------------------------------------------

    @property
    def name(self):
        """
        :return: Name
        :rtype: str
        """
        return self._name

    @property
    def points(self):
        """
        :return: Object space points
        :rtype: numpy.Array
        """
        return self._points

    @property
    def num_vertices(self):
        """
        :return: Vertex count
        :rtype: int
        """
        return len(self._points)

    @property
    def matrix(self):
        """
        :return: World matrix
        :rtype: numpy.Array
        """
        return self._matrix

    def set_matrix(self, matrix):
        """
        :param list/numpy.Array matrix:
        :raise ValueError: When matrix is not a 4x4 matrix.
        """
        matrix = numpy.array(matrix, dtype=float)
        if matrix.shape != (4, 4):
            raise ValueError("Mesh '{}' matrix should be 4x4, got shape {}.".format(self._name, matrix.shape))

        self._matrix = matrix

    def local_to_world(self, points):
        """
        :param numpy.Array points:
        :return: World points
        :rtype: numpy.Array
        """
        return space.local_to_world(self._matrix, points)

    def world_to_local(self, points):
        """
        :param numpy.Array points:
        :return: Local points
        :rtype: numpy.Array
        """
        return space.world_to_local(self._matrix, points)

    # ------------------------------------------------------------------------

    @property
    def channels(self):
        """
        :return: Channels
        :rtype: list[BlendShapeChannel]
        """
        return list(self._channels.values())

    @property
    def channel_names(self):
        """
        :return: Channel names
        :rtype: list[str]
        """
        return list(self._channels.keys())

    def get_channel(self, name):
        """
        :param str name:
        :return: Channel
        :rtype: BlendShapeChannel
        :raise KeyError: When the channel doesn't exist.
        """
        try:
            return self._channels[name]
        except KeyError:
            raise KeyError("Mesh '{}' doesn't contain a blend shape channel named '{}'.".format(self._name, name))

    def add_channel(self, channel):
        """
        :param BlendShapeChannel channel:
        :raise ValueError: When a channel with the same name already exists.
        :raise ValueError: When a frame doesn't match the vertex count.
        """
        if channel.name in self._channels:
            raise ValueError("Mesh '{}' already contains a channel named '{}'.".format(self._name, channel.name))

        for frame in channel.frames:
            self._validate_frame(frame)

        self._channels[channel.name] = channel

    def add_blend_shape_frame(self, name, weight, deltas, normals=None, tangents=None):
        """
        Add a frame to the channel with the provided name, the channel is
        created when it doesn't exist yet.

        :param str name:
        :param float weight:
        :param list/numpy.Array deltas:
        :param list/numpy.Array/None normals:
        :param list/numpy.Array/None tangents:
        :return: Channel
        :rtype: BlendShapeChannel
        :raise ValueError: When the deltas don't match the vertex count.
        """
        frame = BlendShapeFrame.create(weight, deltas, normals, tangents)
        self._validate_frame(frame)

        if name not in self._channels:
            self._channels[name] = BlendShapeChannel(name)

        channel = self._channels[name]
        channel.add_frame(frame)
        return channel

    def _validate_frame(self, frame):
        """
        :param BlendShapeFrame frame:
        :raise ValueError: When the frame doesn't match the vertex count.
        """
        if len(frame.deltas) != self.num_vertices:
            raise ValueError("Frame contains {} deltas, mesh '{}' has {} vertices.".format(
                len(frame.deltas), self._name, self.num_vertices
            ))

    def duplicate(self, name):
        """
        Duplicate the points and placement of the mesh without any of its
        blend shape channels.

        :param str name:
        :return: Mesh
        :rtype: Mesh
        """
        return Mesh(name, self._points.copy(), self._matrix.copy())
