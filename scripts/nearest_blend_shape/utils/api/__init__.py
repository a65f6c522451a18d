from nearest_blend_shape.utils.api import conversion
