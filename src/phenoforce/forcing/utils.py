import numpy as np

from phenoforce.core.constants import NEGLIGIBLE_LIMIT


def negligible(values, limit: float = NEGLIGIBLE_LIMIT):
    """True where a value is effectively zero"""
    return np.abs(values) < limit
