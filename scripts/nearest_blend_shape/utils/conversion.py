import numpy


def as_vector(value, name="vector"):
    """
    :param list/tuple/numpy.Array value:
    :param str name: Used in error messages.
    :return: Vector
    :rtype: numpy.Array
    :raise TypeError: When value cannot be converted into numbers.
    :raise ValueError: When value is not a finite 3D vector.
    """
    try:
        vector = numpy.array(value, dtype=float)
    except (TypeError, ValueError):
        raise TypeError("Unable to set {}, should be a sequence of 3 numbers.".format(name))

    if vector.shape != (3,):
        raise ValueError("Unable to set {}, expected 3 values got shape {}.".format(name, vector.shape))
    elif not numpy.all(numpy.isfinite(vector)):
        raise ValueError("Unable to set {}, values are not allowed to be infinite or nan.".format(name))

    return vector


def as_points(values, name="points"):
    """
    Convert the provided values into a (N, 3) float array. An empty
    sequence is converted into an array of shape (0, 3) so callers can
    check the point count regardless of the input.

    :param list/numpy.Array values:
    :param str name: Used in error messages.
    :return: Points
    :rtype: numpy.Array
    :raise ValueError: When values cannot be shaped into 3D points.
    """
    points = numpy.array(values, dtype=float)
    if points.size == 0:
        return points.reshape((0, 3))
    elif points.ndim != 2 or points.shape[1] != 3:
        raise ValueError("Unable to use {}, expected shape (N, 3) got {}.".format(name, points.shape))

    return points


def as_distance(value, name="max distance"):
    """
    :param float/int value:
    :param str name: Used in error messages.
    :return: Distance
    :rtype: float
    :raise TypeError: When value is not a float or int.
    :raise ValueError: When value is lower or equal to 0.
    """
    if isinstance(value, bool) or not isinstance(value, (float, int)):
        raise TypeError("Unable to set {}, should be of type int/float.".format(name))
    elif not numpy.isfinite(value):
        raise ValueError("Unable to set {}, value is not finite.".format(name))
    elif value <= 0.0:
        raise ValueError("The {} is not allowed to be 0.0 or lower.".format(name))

    return float(value)
