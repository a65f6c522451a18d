OUTPUT_SUFFIX = "_TGT"


def get_name(node_name):
    """
    Strip the dag parenting from the provided node name, the remaining
    name can still contain namespaces.

    :param str node_name:
    :return: Name
    :rtype: str
    """
    return node_name.rsplit("|", 1)[-1]


def get_leaf_name(node_name):
    """
    Strip both the dag parenting and the namespaces from the provided node
    name.

    :param str node_name:
    :return: Leaf name
    :rtype: str
    """
    return get_name(node_name).rsplit(":", 1)[-1]


def get_output_name(node_name, name=None):
    """
    :param str node_name:
    :param str/None name: Explicit name, returned untouched when provided.
    :return: Output name
    :rtype: str
    """
    if name is not None:
        return name

    return "{}{}".format(get_leaf_name(node_name), OUTPUT_SUFFIX)
