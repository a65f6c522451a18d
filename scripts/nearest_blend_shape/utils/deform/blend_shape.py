import numpy
from maya import cmds

from nearest_blend_shape.utils import api


def get_blend_shape(node):
    """
    :param str node:
    :return: Blend shape
    :rtype: str/None
    """
    nodes = cmds.listRelatives(node, shapes=True) or []
    nodes.append(node)

    for history in cmds.listHistory(nodes) or []:
        if cmds.nodeType(history) == "blendShape":
            return history


def get_blend_shape_targets(blend_shape):
    """
    :param str blend_shape:
    :return: Blend shape targets
    :rtype: list[str]
    """
    return cmds.listAttr("{}.w".format(blend_shape), multi=True) or []


def iter_blend_shape_deltas(node, blend_shape):
    """
    Yield the object space deltas of every target by driving its weight to
    1 while all other targets are set to 0. The previous weights are
    restored once all targets are read.

    :param str node:
    :param str blend_shape:
    :return: Target name and deltas
    :rtype: generator[tuple[str, numpy.Array]]
    """
    targets = get_blend_shape_targets(blend_shape)
    weights = {name: cmds.getAttr("{}.{}".format(blend_shape, name)) for name in targets}
    envelope = cmds.getAttr("{}.envelope".format(blend_shape))

    cmds.setAttr("{}.envelope".format(blend_shape), 1)
    for name in targets:
        cmds.setAttr("{}.{}".format(blend_shape, name), 0)

    try:
        base_points = api.conversion.get_points(node)
        for name in targets:
            cmds.setAttr("{}.{}".format(blend_shape, name), 1)
            points = api.conversion.get_points(node)
            cmds.setAttr("{}.{}".format(blend_shape, name), 0)
            yield name, points - base_points
    finally:
        cmds.setAttr("{}.envelope".format(blend_shape), envelope)
        for name, weight in weights.items():
            cmds.setAttr("{}.{}".format(blend_shape, name), weight)


def create_blend_shape(node, base_points, deltas):
    """
    Create a blend shape on the node with a target for every provided delta
    field. Each target is sculpted on a temporary duplicate of the node
    which is deleted once it is connected.

    :param str node:
    :param numpy.Array base_points:
    :param list[tuple[str, numpy.Array]] deltas: Target name and deltas.
    :return: Blend shape
    :rtype: str/None
    """
    if not deltas:
        return

    targets = []
    for name, values in deltas:
        target = cmds.duplicate(node, name=name)[0]
        api.conversion.set_points(target, numpy.asarray(base_points) + values)
        targets.append(target)

    blend_shape = cmds.blendShape(targets, node)[0]
    cmds.delete(targets)
    return blend_shape
