from functools import wraps


def memoize(func):
    """
    The memoize decorator caches the result of a function using the
    identity of its positional arguments and the value of its keyword
    arguments as a key. Positional arguments are keyed by identity as they
    are often numpy arrays or objects that cannot be hashed. The cache can
    be cleared by calling the clear function on the decorated function.
    """
    cache = {}

    @wraps(func)
    def wrapper(*args, **kwargs):
        key = (tuple(id(arg) for arg in args), tuple(sorted(kwargs.items())))
        if key not in cache:
            cache[key] = func(*args, **kwargs)

        return cache[key]

    def clear():
        cache.clear()

    wrapper.clear = clear
    return wrapper
