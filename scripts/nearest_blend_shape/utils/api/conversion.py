import numpy
import logging
from maya.api import OpenMaya


log = logging.getLogger(__name__)


def get_dag(node):
    """
    :param str node:
    :return: Maya dag path node
    :rtype: OpenMaya.MDagPath
    """
    sel = OpenMaya.MSelectionList()
    sel.add(node)
    return sel.getDagPath(0)


def get_mesh_fn(node):
    """
    :param str node:
    :return: Mesh fn
    :rtype: OpenMaya.MFnMesh
    :raise RuntimeError: When provided node is not a mesh.
    """
    dag = get_dag(node)
    dag.extendToShape()

    if not dag.hasFn(OpenMaya.MFn.kMesh):
        raise RuntimeError("Node '{}' is not a mesh.".format(node))

    return OpenMaya.MFnMesh(dag)


def get_points(node):
    """
    :param str node:
    :return: Object space points
    :rtype: numpy.Array
    :raise RuntimeError: When provided node is not a mesh.
    """
    mesh_fn = get_mesh_fn(node)
    return numpy.array(mesh_fn.getPoints(OpenMaya.MSpace.kObject))[:, :-1]


def set_points(node, points):
    """
    :param str node:
    :param numpy.Array points: Object space points.
    :raise RuntimeError: When provided node is not a mesh.
    """
    mesh_fn = get_mesh_fn(node)
    mesh_fn.setPoints([OpenMaya.MPoint(*point) for point in points], OpenMaya.MSpace.kObject)


def get_world_matrix(node):
    """
    The matrix of the shape path includes all of the parent transforms,
    Maya matrices use the row vector convention.

    :param str node:
    :return: World matrix
    :rtype: numpy.Array
    """
    dag = get_dag(node)
    dag.extendToShape()
    return numpy.array(list(dag.inclusiveMatrix())).reshape((4, 4))
