"""
Read meshes from a Maya scene into the host independent mesh classes and
create Maya meshes from the transfer output. Maya blend shapes only store a
single frame per target, targets are read with a frame weight of 1.0.
"""
import time
import logging
from maya import cmds

from nearest_blend_shape import mesh
from nearest_blend_shape import transfer
from nearest_blend_shape.utils import api
from nearest_blend_shape.utils import undo
from nearest_blend_shape.utils import naming
from nearest_blend_shape.utils.deform import blend_shape

log = logging.getLogger(__name__)

FRAME_WEIGHT = 1.0


def read_mesh(node, channels=True):
    """
    :param str node:
    :param bool channels: Read the blend shape targets as channels.
    :return: Mesh
    :rtype: nearest_blend_shape.mesh.Mesh
    :raise RuntimeError: When the node doesn't exist.
    :raise RuntimeError: When the node is not a mesh.
    """
    if not cmds.objExists(node):
        raise RuntimeError("Node '{}' doesn't exist.".format(node))

    points = api.conversion.get_points(node)
    matrix = api.conversion.get_world_matrix(node)
    data = mesh.Mesh(naming.get_name(node), points, matrix)

    bs = blend_shape.get_blend_shape(node) if channels else None
    if bs is not None:
        for name, deltas in blend_shape.iter_blend_shape_deltas(node, bs):
            data.add_blend_shape_frame(name, FRAME_WEIGHT, deltas)

    return data


def create_mesh(data, target):
    """
    Duplicate the target node and attach the channels of the mesh data as
    a blend shape. Only the highest weight frame of every channel is used.

    :param nearest_blend_shape.mesh.Mesh data:
    :param str target:
    :return: Output node
    :rtype: str
    """
    with undo.undo_chunk("nearestBlendShape"):
        output = cmds.duplicate(target, name=data.name)[0]
        deltas = [(channel.name, channel.get_frame().deltas) for channel in data.channels]
        blend_shape.create_blend_shape(output, data.points, deltas)

    return output


def execute(source, target, settings, name=None, progress=None):
    """
    :param str source:
    :param str target:
    :param nearest_blend_shape.settings.Settings settings:
    :param str/None name:
    :param callable/None progress:
    :return: Output node
    :rtype: str
    :raise RuntimeError: When source or target don't exist or are not meshes.
    :raise RuntimeError: When the source has no blend shape.
    """
    t = time.time()

    source_mesh = read_mesh(source)
    target_mesh = read_mesh(target, channels=False)
    if not source_mesh.channels:
        raise RuntimeError("Source '{}' doesn't contain a blend shape node connection.".format(source))

    selection = [channel for channel in source_mesh.channel_names if settings.is_channel_selected(channel)]
    transfer_ = transfer.Transfer.from_settings(settings, source_mesh, target_mesh)
    data = transfer_.execute(channels=selection, name=naming.get_output_name(target, name), progress=progress)

    output = create_mesh(data, target)
    log.info("Created '{}' from '{}' in {:.3f} seconds.".format(output, source, time.time() - t))
    return output
