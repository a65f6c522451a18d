import numpy
import unittest

from nearest_blend_shape import mesh


class TestMesh(unittest.TestCase):
    def setUp(self):
        self.mesh = mesh.Mesh("source_MESH", [(0, 0, 0), (1, 0, 0), (2, 0, 0)])

    def test_add_blend_shape_frame(self):
        channel = self.mesh.add_blend_shape_frame("smile", 50.0, [(0, 1, 0)] * 3)
        self.mesh.add_blend_shape_frame("smile", 100.0, [(0, 2, 0)] * 3)

        self.assertEqual(self.mesh.channel_names, ["smile"])
        self.assertIs(self.mesh.get_channel("smile"), channel)
        self.assertEqual(len(channel.frames), 2)

        frame = channel.get_frame()
        self.assertEqual(frame.weight, 100.0)
        numpy.testing.assert_array_equal(frame.deltas, [(0, 2, 0)] * 3)
        numpy.testing.assert_array_equal(frame.normals, numpy.zeros((3, 3)))
        numpy.testing.assert_array_equal(frame.tangents, numpy.zeros((3, 3)))

    def test_frame_weight_order(self):
        self.mesh.add_blend_shape_frame("smile", 100.0, numpy.zeros((3, 3)))
        with self.assertRaises(ValueError):
            self.mesh.add_blend_shape_frame("smile", 50.0, numpy.zeros((3, 3)))

    def test_frame_vertex_count(self):
        with self.assertRaises(ValueError):
            self.mesh.add_blend_shape_frame("smile", 100.0, numpy.zeros((2, 3)))
        with self.assertRaises(ValueError):
            self.mesh.add_blend_shape_frame("smile", 100.0, numpy.zeros((3, 3)), normals=numpy.zeros((2, 3)))

    def test_add_channel(self):
        channel = mesh.BlendShapeChannel("blink", [mesh.BlendShapeFrame.create(1.0, numpy.zeros((3, 3)))])
        self.mesh.add_channel(channel)

        with self.assertRaises(ValueError):
            self.mesh.add_channel(mesh.BlendShapeChannel("blink"))
        with self.assertRaises(ValueError):
            self.mesh.add_channel(
                mesh.BlendShapeChannel("wide", [mesh.BlendShapeFrame.create(1.0, numpy.zeros((4, 3)))])
            )

    def test_missing_channel(self):
        with self.assertRaises(KeyError):
            self.mesh.get_channel("missing")

    def test_channel_without_frames(self):
        with self.assertRaises(RuntimeError):
            mesh.BlendShapeChannel("empty").get_frame()

    def test_duplicate(self):
        matrix = numpy.identity(4)
        matrix[3, :3] = (1, 2, 3)
        self.mesh.set_matrix(matrix)
        self.mesh.add_blend_shape_frame("smile", 100.0, numpy.zeros((3, 3)))

        duplicate = self.mesh.duplicate("output_MESH")
        self.assertEqual(duplicate.name, "output_MESH")
        self.assertEqual(duplicate.channels, [])
        numpy.testing.assert_array_equal(duplicate.points, self.mesh.points)
        numpy.testing.assert_array_equal(duplicate.matrix, matrix)

    def test_world_conversion(self):
        matrix = numpy.identity(4)
        matrix[3, :3] = (1, 2, 3)
        self.mesh.set_matrix(matrix)

        world = self.mesh.local_to_world(self.mesh.points)
        numpy.testing.assert_allclose(world, [(1, 2, 3), (2, 2, 3), (3, 2, 3)])
        numpy.testing.assert_allclose(self.mesh.world_to_local(world), self.mesh.points)

    def test_invalid_matrix(self):
        with self.assertRaises(ValueError):
            self.mesh.set_matrix(numpy.identity(3))
