"""
Nearest neighbour searchers over a static set of 3D points. The searchers
are built in the local space of the source mesh and queried with points
that are already converted into that same space.

Both searchers compare squared distances and resolve equal distances to
the lowest point index, this makes sure the brute force searcher and the
k-d tree return the exact same index for any query.
"""
import logging
import numpy

from nearest_blend_shape.utils import conversion

log = logging.getLogger(__name__)

NO_MATCH = -1


class PointSearcher(object):
    """
    Base class for a searcher over a point set. The points are copied on
    construction and never changed afterwards.

    :param list/numpy.Array points:
    :raise RuntimeError: When no points are provided.
    """
    def __init__(self, points):
        points = conversion.as_points(points, "source points")
        if not len(points):
            raise RuntimeError("No points to index.")

        self._points = points
        self._points.setflags(write=False)

    def __len__(self):
        return len(self._points)

    # ------------------------------------------------------------------------

    @property
    def points(self):
        """
        :return: Points
        :rtype: numpy.Array
        """
        return self._points

    def get_point(self, index):
        """
        :param int index:
        :return: Point
        :rtype: numpy.Array
        """
        return self._points[index]

    # ------------------------------------------------------------------------

    @staticmethod
    def get_squared_distance(max_distance):
        """
        A max distance of 0 or lower only allows exact coincident points to
        match, the squared distance is clamped to 0.

        :param float max_distance:
        :return: Squared max distance
        :rtype: float
        """
        return float(max_distance) ** 2 if max_distance > 0 else 0.0

    def find_nearest(self, point, max_distance):
        """
        :param list/numpy.Array point:
        :param float max_distance:
        :return: Index of the nearest point or NO_MATCH
        :rtype: int
        """
        raise NotImplementedError


class BruteForceSearcher(PointSearcher):
    """
    Compare the query against every point, O(N) per query.
    """
    def find_nearest(self, point, max_distance):
        x, y, z = conversion.as_vector(point, "query point")
        dx = self._points[:, 0] - x
        dy = self._points[:, 1] - y
        dz = self._points[:, 2] - z
        distances = dx * dx + dy * dy + dz * dz

        # argmin returns the first occurrence, which is the lowest index
        index = int(numpy.argmin(distances))
        if distances[index] <= self.get_squared_distance(max_distance):
            return index

        return NO_MATCH


class KDTreeSearcher(PointSearcher):
    """
    A k-d tree with k=3 built once over the points. Each node is split on
    the median of the axis defined by its depth modulo 3. The nodes are
    stored in flat arrays where a node is addressed by its position and a
    missing child is stored as -1.

    Queries take O(log N) on average, degenerate input such as collinear or
    duplicated points can reduce the search to O(N).
    """
    def __init__(self, points):
        super(KDTreeSearcher, self).__init__(points)

        num = len(self._points)
        self._coordinates = self._points.tolist()
        self._nodes = numpy.full(num, -1, dtype=int)
        self._left = numpy.full(num, -1, dtype=int)
        self._right = numpy.full(num, -1, dtype=int)
        self._count = 0

        self._root = self._build(numpy.arange(num), 0)
        self._nodes = self._nodes.tolist()
        self._left = self._left.tolist()
        self._right = self._right.tolist()
        log.debug("Built k-d tree over {} points.".format(num))

    def _build(self, indices, depth):
        """
        :param numpy.Array indices:
        :param int depth:
        :return: Node
        :rtype: int
        """
        if not len(indices):
            return NO_MATCH

        # a stable sort keeps equal coordinates in index order, every left
        # coordinate ends up <= the median and every right coordinate >=.
        axis = depth % 3
        order = numpy.argsort(self._points[indices, axis], kind="stable")
        indices = indices[order]
        mid = len(indices) // 2

        node = self._count
        self._count += 1
        self._nodes[node] = indices[mid]
        self._left[node] = self._build(indices[:mid], depth + 1)
        self._right[node] = self._build(indices[mid + 1:], depth + 1)
        return node

    def _search(self, node, point, depth, best):
        """
        :param int node:
        :param list[float] point:
        :param int depth:
        :param list best: Mutable [index, squared distance] pair.
        """
        if node == NO_MATCH:
            return

        index = self._nodes[node]
        coordinate = self._coordinates[index]
        dx = coordinate[0] - point[0]
        dy = coordinate[1] - point[1]
        dz = coordinate[2] - point[2]
        distance = dx * dx + dy * dy + dz * dz
        if distance < best[1] or (distance == best[1] and index < best[0]):
            best[0] = index
            best[1] = distance

        axis = depth % 3
        diff = point[axis] - coordinate[axis]
        if diff < 0:
            near, far = self._left[node], self._right[node]
        else:
            near, far = self._right[node], self._left[node]

        self._search(near, point, depth + 1, best)

        # the far side can still hold an equal distance with a lower index,
        # so it is only pruned when the plane is strictly further away.
        if diff * diff <= best[1]:
            self._search(far, point, depth + 1, best)

    def find_nearest(self, point, max_distance):
        point = conversion.as_vector(point, "query point").tolist()
        best = [NO_MATCH, float("inf")]
        self._search(self._root, point, 0, best)

        if best[1] <= self.get_squared_distance(max_distance):
            return best[0]

        return NO_MATCH


STRATEGIES = {
    "brute_force": BruteForceSearcher,
    "kd_tree": KDTreeSearcher,
}


def get_searcher(points, use_kd_tree=True):
    """
    :param list/numpy.Array points:
    :param bool use_kd_tree:
    :return: Searcher
    :rtype: PointSearcher
    :raise RuntimeError: When no points are provided.
    """
    strategy = "kd_tree" if use_kd_tree else "brute_force"
    return STRATEGIES[strategy](points)
