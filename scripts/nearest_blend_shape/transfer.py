import time
import numpy
import logging
import scipy.linalg

from nearest_blend_shape import mesh
from nearest_blend_shape import space
from nearest_blend_shape import search
from nearest_blend_shape.utils import naming
from nearest_blend_shape.utils import decorator
from nearest_blend_shape.utils import conversion

log = logging.getLogger(__name__)

EPSILON = 1e-6
PROGRESS_INTERVAL = 256


class TransferCancelled(RuntimeError):
    pass


def find_matches(searcher, points, max_distance, progress=None):
    """
    Find the nearest source index for every query point. Every query is
    independent of the others. The progress callback is called in between
    queries with the current and total count, when it returns False the
    search is cancelled.

    :param nearest_blend_shape.search.PointSearcher searcher:
    :param numpy.Array points: Query points in source local space.
    :param float max_distance:
    :param callable/None progress:
    :return: Matched indices, -1 for no match
    :rtype: numpy.Array
    :raise TransferCancelled: When the progress callback returns False.
    """
    total = len(points)
    matches = numpy.full(total, search.NO_MATCH, dtype=int)

    for i, point in enumerate(points):
        if progress is not None and not i % PROGRESS_INTERVAL:
            if progress(i, total) is False:
                raise TransferCancelled("Transfer cancelled at vertex {}/{}.".format(i, total))

        matches[i] = searcher.find_nearest(point, max_distance)

    if progress is not None:
        progress(total, total)

    return matches


def compose_deltas(source_deltas, matches, offset=None, epsilon=EPSILON):
    """
    Compose the target deltas from the matched source deltas. Source
    vertices without deformation are ignored, even when they are the
    nearest match, leaving the target delta at zero. When an offset is
    provided it is scaled by the matched delta before it is added:
    delta + offset * delta.

    :param numpy.Array source_deltas:
    :param numpy.Array matches:
    :param list/numpy.Array/None offset:
    :param float epsilon:
    :return: Target deltas
    :rtype: numpy.Array
    """
    source_deltas = conversion.as_points(source_deltas, "source deltas")
    matches = numpy.asarray(matches, dtype=int)
    deltas = numpy.zeros((len(matches), 3))

    vertices = numpy.nonzero(matches != search.NO_MATCH)[0]
    matched = source_deltas[matches[vertices]]
    active = scipy.linalg.norm(matched, axis=1) > epsilon if len(matched) else numpy.zeros(0, dtype=bool)

    values = matched[active]
    if offset is not None:
        offset = conversion.as_vector(offset, "channel offset")
        values = values + offset * values

    deltas[vertices[active]] = values
    return deltas


def transfer_channels(
        source_channels,
        source_points,
        target_points,
        selection=None,
        offsets=None,
        bridge=None,
        max_distance=0.1,
        use_kd_tree=True,
        progress=None,
        searcher=None
):
    """
    Transfer the blend shape channels from the source onto the target
    points. The nearest source vertex of every target vertex is found once
    and used for all selected channels. All of the validation is done
    before any of the channels are processed.

    :param list[nearest_blend_shape.mesh.BlendShapeChannel] source_channels:
    :param list/numpy.Array source_points:
    :param list/numpy.Array target_points:
    :param list[str]/None selection: Channel names, None selects all.
    :param dict/None offsets: Per channel offset multipliers.
    :param nearest_blend_shape.space.CoordinateBridge/None bridge:
    :param float max_distance:
    :param bool use_kd_tree:
    :param callable/None progress:
    :param nearest_blend_shape.search.PointSearcher/None searcher:
        Prebuilt searcher over the source points.
    :return: Transferred channels
    :rtype: list[nearest_blend_shape.mesh.BlendShapeChannel]
    :raise RuntimeError: When source or target contain no points.
    :raise ValueError: When max distance is lower or equal to 0.
    :raise ValueError: When a selected channel doesn't exist on the source.
    :raise ValueError: When a channel doesn't match the source vertex count.
    :raise TransferCancelled: When the progress callback returns False.
    """
    source_points = conversion.as_points(source_points, "source points")
    target_points = conversion.as_points(target_points, "target points")
    if not len(source_points):
        raise RuntimeError("Source contains no points, unable to transfer.")
    elif not len(target_points):
        raise RuntimeError("Target contains no points, unable to transfer.")

    max_distance = conversion.as_distance(max_distance)
    offsets = offsets or {}
    bridge = bridge or space.CoordinateBridge()

    names = [channel.name for channel in source_channels]
    selection = names if selection is None else list(selection)
    missing = [name for name in selection if name not in names]
    if missing:
        raise ValueError("Selected channels {} don't exist on the source.".format(missing))

    frames = []
    for channel in source_channels:
        if channel.name not in selection:
            continue

        frame = channel.get_frame()
        if len(frame.deltas) != len(source_points):
            raise ValueError("Channel '{}' contains {} deltas, source has {} vertices.".format(
                channel.name, len(frame.deltas), len(source_points)
            ))

        frames.append((channel.name, frame))

    if searcher is None:
        searcher = search.get_searcher(source_points, use_kd_tree=use_kd_tree)

    query_points = bridge.to_source(target_points)
    matches = find_matches(searcher, query_points, max_distance, progress=progress)
    log.debug("Matched {}/{} target vertices.".format(numpy.count_nonzero(matches != search.NO_MATCH), len(matches)))

    channels = []
    for name, frame in frames:
        deltas = compose_deltas(frame.deltas, matches, offsets.get(name))
        num = numpy.count_nonzero(numpy.any(deltas, axis=1))
        if not num:
            log.warning("Channel '{}' didn't transfer any deltas, "
                        "try increasing the max distance.".format(name))
        else:
            log.info("Transferred channel '{}' onto {} vertices.".format(name, num))

        output = mesh.BlendShapeChannel(name)
        output.add_frame(mesh.BlendShapeFrame.create(frame.weight, deltas))
        channels.append(output)

    return channels


class Transfer(object):
    """
    Transfer the blend shapes of a source mesh onto a target mesh with a
    different topology. Each target vertex receives the delta of the
    nearest source vertex within the max distance. The search position of
    the target vertices can be adjusted using the search transform to
    compensate for differences in the rest pose.
    """

    def __init__(
            self,
            source_mesh=None,
            target_mesh=None,
            max_distance=0.1,
            use_kd_tree=True,
            search_transform=None,
            offsets=None
    ):
        self._source_mesh = None
        self._target_mesh = None
        self._max_distance = 0.1
        self._use_kd_tree = True
        self._search_transform = space.SearchTransform()
        self._offsets = {}

        self.set_source_mesh(source_mesh)
        self.set_target_mesh(target_mesh)
        self.set_max_distance(max_distance)
        self.set_use_kd_tree(use_kd_tree)
        self.set_search_transform(search_transform)

        for name, offset in (offsets or {}).items():
            self.set_channel_offset(name, offset)

    @classmethod
    def from_settings(cls, settings, source_mesh=None, target_mesh=None):
        """
        :param nearest_blend_shape.settings.Settings settings:
        :param nearest_blend_shape.mesh.Mesh/None source_mesh:
        :param nearest_blend_shape.mesh.Mesh/None target_mesh:
        :return: Transfer
        :rtype: Transfer
        """
        return cls(
            source_mesh,
            target_mesh,
            max_distance=settings.max_distance,
            use_kd_tree=settings.use_kd_tree,
            search_transform=settings.get_search_transform(),
            offsets=settings.offsets,
        )

    # ------------------------------------------------------------------------

    @property
    def source_mesh(self):
        """
        :return: Source mesh
        :rtype: nearest_blend_shape.mesh.Mesh
        """
        return self._source_mesh

    @decorator.memoize
    def get_source_searcher(self):
        """
        :return: Source searcher
        :rtype: nearest_blend_shape.search.PointSearcher
        :raise RuntimeError: When source is not defined.
        :raise RuntimeError: When source contains no points.
        """
        if self.source_mesh is None:
            raise RuntimeError("Source mesh has not been defined, unable to build searcher.")

        t = time.time()
        searcher = search.get_searcher(self.source_mesh.points, use_kd_tree=self.use_kd_tree)
        log.debug("Built {} for '{}' in {:.3f} seconds.".format(
            searcher.__class__.__name__, self.source_mesh.name, time.time() - t
        ))
        return searcher

    def set_source_mesh(self, source_mesh):
        """
        :param nearest_blend_shape.mesh.Mesh/None source_mesh:
        """
        self._source_mesh = source_mesh
        self.get_source_searcher.clear()

    @property
    def target_mesh(self):
        """
        :return: Target mesh
        :rtype: nearest_blend_shape.mesh.Mesh
        """
        return self._target_mesh

    def set_target_mesh(self, target_mesh):
        """
        :param nearest_blend_shape.mesh.Mesh/None target_mesh:
        """
        self._target_mesh = target_mesh

    # ------------------------------------------------------------------------

    @property
    def max_distance(self):
        """
        :return: Max distance
        :rtype: float
        """
        return self._max_distance

    def set_max_distance(self, max_distance):
        """
        :param float max_distance:
        :raise TypeError: When max distance is not a float or int.
        :raise ValueError: When max distance is lower or equal to 0.
        """
        self._max_distance = conversion.as_distance(max_distance)

    @property
    def use_kd_tree(self):
        """
        :return: K-d tree usage state
        :rtype: bool
        """
        return self._use_kd_tree

    def set_use_kd_tree(self, state):
        """
        :param bool state:
        :raise TypeError: When state is not a bool.
        """
        if not isinstance(state, bool):
            raise TypeError("Unable to set k-d tree usage state, should be of type bool.")

        self._use_kd_tree = state
        self.get_source_searcher.clear()

    @property
    def search_transform(self):
        """
        :return: Search transform
        :rtype: nearest_blend_shape.space.SearchTransform
        """
        return self._search_transform

    def set_search_transform(self, search_transform):
        """
        :param nearest_blend_shape.space.SearchTransform/None search_transform:
        :raise TypeError: When search transform is not a SearchTransform.
        """
        if search_transform is None:
            search_transform = space.SearchTransform()
        elif not isinstance(search_transform, space.SearchTransform):
            raise TypeError("Unable to set search transform, should be of type SearchTransform.")

        self._search_transform = search_transform

    @property
    def offsets(self):
        """
        :return: Per channel offsets
        :rtype: dict
        """
        return {name: offset.copy() for name, offset in self._offsets.items()}

    def get_channel_offset(self, name):
        """
        :param str name:
        :return: Channel offset
        :rtype: numpy.Array
        """
        offset = self._offsets.get(name)
        return numpy.zeros(3) if offset is None else offset.copy()

    def set_channel_offset(self, name, offset):
        """
        :param str name:
        :param list/tuple/numpy.Array offset:
        :raise TypeError: When offset is not a sequence of numbers.
        :raise ValueError: When offset is not a finite 3D vector.
        """
        self._offsets[name] = conversion.as_vector(offset, "channel offset")

    # ------------------------------------------------------------------------

    def is_valid(self):
        """
        :return: Valid state
        :rtype: bool
        """
        is_source_valid = self.source_mesh is not None and self.source_mesh.num_vertices > 0
        is_target_valid = self.target_mesh is not None and self.target_mesh.num_vertices > 0
        return bool(is_source_valid and is_target_valid)

    def is_valid_with_blend_shape(self):
        """
        :return: Valid state + blend shape channels
        :rtype: bool
        """
        if not self.is_valid():
            return False

        return bool(self.source_mesh.channels)

    # ------------------------------------------------------------------------

    def execute(self, channels=None, name=None, progress=None):
        """
        Transfer the selected channels onto a duplicate of the target mesh.
        The frames are only added to the output once every channel has been
        transferred.

        :param list[str]/None channels: Channel names, None selects all.
        :param str/None name: Output mesh name.
        :param callable/None progress:
        :return: Output mesh
        :rtype: nearest_blend_shape.mesh.Mesh
        :raise RuntimeError: When transfer is invalid.
        :raise ValueError: When a selected channel doesn't exist on the source.
        :raise TransferCancelled: When the progress callback returns False.
        """
        t = time.time()

        if not self.is_valid():
            raise RuntimeError("Invalid transfer, set source and target with points.")

        bridge = space.CoordinateBridge.from_meshes(self.source_mesh, self.target_mesh, self.search_transform)
        transferred = transfer_channels(
            self.source_mesh.channels,
            self.source_mesh.points,
            self.target_mesh.points,
            selection=channels,
            offsets=self._offsets,
            bridge=bridge,
            max_distance=self.max_distance,
            progress=progress,
            searcher=self.get_source_searcher(),
        )

        output = self.target_mesh.duplicate(naming.get_output_name(self.target_mesh.name, name))
        for channel in transferred:
            frame = channel.get_frame()
            output.add_blend_shape_frame(channel.name, frame.weight, frame.deltas, frame.normals, frame.tangents)

        log.info("Transferred {} channel(s) onto '{}' in {:.3f} seconds.".format(
            len(transferred), output.name, time.time() - t
        ))

        return output
