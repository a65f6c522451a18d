"""
User adjustable settings of a transfer. The settings are read when a
transfer is created and are not consulted while it runs. They convert into
plain data so they can be stored between sessions.
"""
import io
import json
import logging

from nearest_blend_shape import space
from nearest_blend_shape.utils import conversion

log = logging.getLogger(__name__)


class Settings(object):
    def __init__(self):
        self._max_distance = 0.1
        self._use_kd_tree = True
        self._search_transform = space.SearchTransform()
        self._channels = None
        self._offsets = {}

    def __eq__(self, other):
        if not isinstance(other, Settings):
            return NotImplemented

        return self.as_dict() == other.as_dict()

    def __ne__(self, other):
        result = self.__eq__(other)
        return result if result is NotImplemented else not result

    # ------------------------------------------------------------------------

    @property
    def max_distance(self):
        """
        :return: Max distance
        :rtype: float
        """
        return self._max_distance

    def set_max_distance(self, max_distance):
        """
        :param float max_distance:
        :raise TypeError: When max distance is not a float or int.
        :raise ValueError: When max distance is lower or equal to 0.
        """
        self._max_distance = conversion.as_distance(max_distance)

    @property
    def use_kd_tree(self):
        """
        :return: K-d tree usage state
        :rtype: bool
        """
        return self._use_kd_tree

    def set_use_kd_tree(self, state):
        """
        :param bool state:
        :raise TypeError: When state is not a bool.
        """
        if not isinstance(state, bool):
            raise TypeError("Unable to set k-d tree usage state, should be of type bool.")

        self._use_kd_tree = state

    # ------------------------------------------------------------------------

    @property
    def search_offset(self):
        return self._search_transform.offset

    def set_search_offset(self, offset):
        self._search_transform.set_offset(offset)

    @property
    def search_rotation(self):
        return self._search_transform.rotation

    def set_search_rotation(self, rotation):
        self._search_transform.set_rotation(rotation)

    @property
    def search_scale(self):
        return self._search_transform.scale

    def set_search_scale(self, scale):
        self._search_transform.set_scale(scale)

    def get_search_transform(self):
        """
        :return: Copy of the search transform
        :rtype: nearest_blend_shape.space.SearchTransform
        """
        return space.SearchTransform(self.search_offset, self.search_rotation, self.search_scale)

    def reset_search(self):
        self._search_transform.reset()

    # ------------------------------------------------------------------------

    @property
    def channels(self):
        """
        :return: Selected channel names, None when all are selected
        :rtype: list[str]/None
        """
        return None if self._channels is None else list(self._channels)

    def set_channels(self, channels):
        """
        :param list[str]/None channels:
        :raise TypeError: When channels contain anything other than strings.
        """
        if channels is None:
            self._channels = None
            return

        channels = list(channels)
        if not all(isinstance(name, str) for name in channels):
            raise TypeError("Unable to set channels, names should be of type str.")

        self._channels = list(dict.fromkeys(channels))

    def is_channel_selected(self, name):
        """
        :param str name:
        :return: Selected state
        :rtype: bool
        """
        return self._channels is None or name in self._channels

    @property
    def offsets(self):
        """
        :return: Per channel offsets
        :rtype: dict
        """
        return {name: offset.copy() for name, offset in self._offsets.items()}

    def set_channel_offset(self, name, offset):
        """
        :param str name:
        :param list/tuple/numpy.Array offset:
        :raise TypeError: When offset is not a sequence of numbers.
        :raise ValueError: When offset is not a finite 3D vector.
        """
        self._offsets[name] = conversion.as_vector(offset, "channel offset")

    def remove_channel_offset(self, name):
        """
        :param str name:
        """
        self._offsets.pop(name, None)

    # ------------------------------------------------------------------------

    def as_dict(self):
        """
        :return: Settings data
        :rtype: dict
        """
        return {
            "max_distance": self.max_distance,
            "use_kd_tree": self.use_kd_tree,
            "search_offset": self.search_offset.tolist(),
            "search_rotation": self.search_rotation.tolist(),
            "search_scale": self.search_scale.tolist(),
            "channels": self.channels,
            "offsets": {name: offset.tolist() for name, offset in sorted(self._offsets.items())},
        }

    @classmethod
    def from_dict(cls, data):
        """
        Missing keys keep their default value, unknown keys are ignored.

        :param dict data:
        :return: Settings
        :rtype: Settings
        :raise TypeError: When a value is of the wrong type.
        :raise ValueError: When a value is invalid.
        """
        settings = cls()
        if "max_distance" in data:
            settings.set_max_distance(data["max_distance"])
        if "use_kd_tree" in data:
            settings.set_use_kd_tree(data["use_kd_tree"])
        if "search_offset" in data:
            settings.set_search_offset(data["search_offset"])
        if "search_rotation" in data:
            settings.set_search_rotation(data["search_rotation"])
        if "search_scale" in data:
            settings.set_search_scale(data["search_scale"])
        if "channels" in data:
            settings.set_channels(data["channels"])

        for name, offset in (data.get("offsets") or {}).items():
            settings.set_channel_offset(name, offset)

        return settings

    def save(self, file_path):
        """
        :param str file_path:
        """
        with io.open(file_path, "w", encoding="utf-8") as f:
            json.dump(self.as_dict(), f, indent=4, sort_keys=True)

        log.info("Saved settings to '{}'.".format(file_path))

    @classmethod
    def load(cls, file_path):
        """
        :param str file_path:
        :return: Settings
        :rtype: Settings
        :raise IOError: When the file cannot be read.
        :raise ValueError: When the file doesn't contain valid settings.
        """
        with io.open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)

        if not isinstance(data, dict):
            raise ValueError("Settings file '{}' doesn't contain a mapping.".format(file_path))

        log.debug("Loaded settings from '{}'.".format(file_path))
        return cls.from_dict(data)
