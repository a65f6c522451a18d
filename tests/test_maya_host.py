import logging
import unittest
import importlib.util

MAYA_AVAILABLE = importlib.util.find_spec("maya") is not None


@unittest.skipUnless(MAYA_AVAILABLE, "Maya is not available, run the tests using mayapy with --maya.")
class TestMayaHost(unittest.TestCase):
    """
    The source is a plane with a blend shape that lifts one of its corners,
    the target is a denser plane placed at a different position in the
    world. The search offset compensates the placement of the target.
    """
    def setUp(self):
        from maya import cmds
        from nearest_blend_shape.utils import api

        logging.disable(logging.CRITICAL)
        cmds.file(new=True, force=True)

        self.source = cmds.polyPlane(name="source_MESH", subdivisionsX=2, subdivisionsY=2)[0]
        self.target = cmds.polyPlane(name="target_MESH", subdivisionsX=4, subdivisionsY=4)[0]
        cmds.setAttr("{}.translateX".format(self.target), 5)

        shape = cmds.duplicate(self.source, name="cornerUp")[0]
        points = api.conversion.get_points(shape)
        points[0, 1] += 1.0
        api.conversion.set_points(shape, points)
        cmds.blendShape(shape, self.source)
        cmds.delete(shape)

    def tearDown(self):
        logging.disable(logging.NOTSET)

    def test_read_mesh(self):
        from nearest_blend_shape import maya_host

        data = maya_host.read_mesh(self.source)
        self.assertEqual(data.num_vertices, 9)
        self.assertEqual(data.channel_names, ["cornerUp"])
        self.assertAlmostEqual(data.get_channel("cornerUp").get_frame().deltas[0][1], 1.0)

    def test_execute(self):
        from maya import cmds
        from nearest_blend_shape import settings
        from nearest_blend_shape import maya_host
        from nearest_blend_shape.utils.deform import blend_shape

        s = settings.Settings()
        s.set_search_offset((-5, 0, 0))
        s.set_max_distance(0.01)

        output = maya_host.execute(self.source, self.target, s)
        self.assertEqual(output, "target_MESH_TGT")
        self.assertTrue(cmds.objExists(output))

        bs = blend_shape.get_blend_shape(output)
        self.assertEqual(blend_shape.get_blend_shape_targets(bs), ["cornerUp"])

    def test_missing_node(self):
        from nearest_blend_shape import settings
        from nearest_blend_shape import maya_host

        with self.assertRaises(RuntimeError):
            maya_host.execute("missing_MESH", self.target, settings.Settings())
