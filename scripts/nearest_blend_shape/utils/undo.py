import contextlib
from maya import cmds


@contextlib.contextmanager
def undo_chunk(name):
    """
    Creating an output mesh consists of many separate cmds calls. Wrapping
    them in this context makes the entire creation undoable in one step,
    the chunk is closed even when one of the calls fails.

    :param str name:
    """
    cmds.undoInfo(openChunk=True, chunkName=name)
    try:
        yield
    finally:
        cmds.undoInfo(closeChunk=True)
