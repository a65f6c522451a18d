import numpy
import unittest

from nearest_blend_shape import search


class TestSearch(unittest.TestCase):
    """
    The brute force searcher and k-d tree are queried with the same points
    and are expected to return the exact same index, including queries
    where multiple points are at an equal distance.
    """
    def setUp(self):
        self.random = numpy.random.RandomState(7)

    def assertEquivalent(self, points, queries, max_distance):
        brute_force = search.BruteForceSearcher(points)
        kd_tree = search.KDTreeSearcher(points)

        for query in queries:
            self.assertEqual(
                brute_force.find_nearest(query, max_distance),
                kd_tree.find_nearest(query, max_distance),
                "Searchers disagree for query {}".format(list(query))
            )

    # ------------------------------------------------------------------------

    def test_empty_points(self):
        for cls in search.STRATEGIES.values():
            with self.assertRaises(RuntimeError):
                cls([])

    def test_get_searcher(self):
        points = [(0, 0, 0), (1, 0, 0)]
        self.assertIsInstance(search.get_searcher(points), search.KDTreeSearcher)
        self.assertIsInstance(search.get_searcher(points, use_kd_tree=False), search.BruteForceSearcher)

    def test_get_point(self):
        points = [(0, 0, 0), (1, 2, 3)]
        for cls in search.STRATEGIES.values():
            searcher = cls(points)
            self.assertEqual(len(searcher), 2)
            numpy.testing.assert_array_equal(searcher.get_point(1), (1, 2, 3))

    def test_points_are_copied(self):
        points = numpy.array([(0.0, 0.0, 0.0), (1.0, 0.0, 0.0)])
        searcher = search.KDTreeSearcher(points)
        points[1] = (5.0, 5.0, 5.0)
        self.assertEqual(searcher.find_nearest((1.0, 0.0, 0.0), 0.1), 1)

    def test_nearest(self):
        points = [(0, 0, 0), (1, 0, 0), (2, 0, 0)]
        for cls in search.STRATEGIES.values():
            searcher = cls(points)
            self.assertEqual(searcher.find_nearest((1.05, 0, 0), 0.2), 1)
            self.assertEqual(searcher.find_nearest((1.9, 0.1, 0), 0.2), 2)
            self.assertEqual(searcher.find_nearest((5, 5, 5), 0.2), search.NO_MATCH)

    def test_cutoff_is_inclusive(self):
        points = [(0, 0, 0), (4, 0, 0)]
        for cls in search.STRATEGIES.values():
            searcher = cls(points)
            self.assertEqual(searcher.find_nearest((0.5, 0, 0), 0.5), 0)
            self.assertEqual(searcher.find_nearest((0.5, 0, 0), 0.5 - 1e-9), search.NO_MATCH)
            self.assertEqual(searcher.find_nearest((0.5 + 1e-9, 0, 0), 0.5), search.NO_MATCH)

    def test_zero_or_negative_distance(self):
        points = [(0, 0, 0), (1, 0, 0)]
        for cls in search.STRATEGIES.values():
            searcher = cls(points)
            for max_distance in (0.0, -1.0):
                self.assertEqual(searcher.find_nearest((1, 0, 0), max_distance), 1)
                self.assertEqual(searcher.find_nearest((1e-9, 0, 0), max_distance), search.NO_MATCH)

    def test_ties_resolve_to_lowest_index(self):
        points = [(1, 0, 0), (-1, 0, 0), (0, 1, 0), (0, -1, 0), (1, 0, 0)]
        for cls in search.STRATEGIES.values():
            searcher = cls(points)
            self.assertEqual(searcher.find_nearest((0, 0, 0), 2.0), 0)
            self.assertEqual(searcher.find_nearest((1, 0, 0), 2.0), 0)

    # ------------------------------------------------------------------------

    def test_equivalence_random(self):
        points = self.random.uniform(-1, 1, size=(500, 3))
        queries = self.random.uniform(-1.2, 1.2, size=(300, 3))
        for max_distance in (0.01, 0.1, 1.0):
            self.assertEquivalent(points, queries, max_distance)

    def test_equivalence_on_points(self):
        points = self.random.uniform(-1, 1, size=(200, 3))
        self.assertEquivalent(points, points, 0.0)

        brute_force = search.BruteForceSearcher(points)
        for i, point in enumerate(points):
            self.assertEqual(brute_force.find_nearest(point, 0.0), i)

    def test_equivalence_duplicates(self):
        points = numpy.repeat(self.random.randint(-2, 3, size=(20, 3)).astype(float), 4, axis=0)
        self.random.shuffle(points)
        queries = self.random.randint(-3, 4, size=(200, 3)).astype(float)
        self.assertEquivalent(points, queries, 1.5)

    def test_equivalence_collinear(self):
        points = numpy.zeros((100, 3))
        points[:, 1] = numpy.linspace(0, 1, 100)
        queries = self.random.uniform(-0.1, 1.1, size=(100, 3))
        self.assertEquivalent(points, queries, 0.5)

    def test_equivalence_grid(self):
        grid = numpy.arange(5, dtype=float)
        points = numpy.array(numpy.meshgrid(grid, grid, grid)).reshape(3, -1).transpose()
        queries = numpy.array(numpy.meshgrid(grid + 0.5, grid, grid - 0.5)).reshape(3, -1).transpose()
        self.assertEquivalent(points, queries, 1.0)
