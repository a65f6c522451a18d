"""
Transfer your blend shapes between meshes with a different topology.

Every vertex of the target mesh receives the delta of the nearest vertex
on the source mesh, as long as that vertex is found within the max
distance. Source vertices that are not deformed by a blend shape never
contribute to the target, keeping the undeformed regions of the target
untouched.

Search
======
The nearest vertex is found using a k-d tree that is built once per source
mesh, a brute force search is available as well and returns identical
results. When the rest pose of the source and target don't line up the
search position of the target vertices can be adjusted using an offset,
rotation and scale. These are applied in world space, the offset first,
then the rotation and scale around the world origin.

Every channel can be given an offset multiplier, the matched delta is
multiplied by this offset and added to the delta. This allows the strength
of the transferred delta to be tweaked per axis.

Command line
::
    import nearest_blend_shape
    from nearest_blend_shape import mesh

    source = mesh.Mesh("source", source_points)
    source.add_blend_shape_frame("jawOpen", 100.0, jaw_open_deltas)
    target = mesh.Mesh("target", target_points)

    transfer = nearest_blend_shape.Transfer(source, target, max_distance=0.1)
    transfer.set_channel_offset("jawOpen", (0.0, 0.25, 0.0))
    output = transfer.execute()

Maya
::
    from nearest_blend_shape import maya_host
    from nearest_blend_shape import settings

    maya_host.execute("source_MESH", "target_MESH", settings.Settings())

Note
====
This tool requires *numpy* and *scipy* to be installed to your environment.
"""
from nearest_blend_shape.transfer import Transfer

__author__ = "Robert Joosten"
__version__ = "0.1.0"
__email__ = "rwm.joosten@gmail.com"
