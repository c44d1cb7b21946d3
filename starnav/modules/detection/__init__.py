"""Hand landmark detection and geometric features."""
from .landmark_extractor import LandmarkExtractor

__all__ = ["LandmarkExtractor"]
