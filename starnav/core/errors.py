"""Exception types raised by the gesture pipeline."""


class StarNavError(Exception):
    """Base class for all pipeline errors."""


class DetectorError(StarNavError):
    """The hand landmark model could not be created or loaded."""


class GestureModelError(StarNavError):
    """The gesture loop ran without a loaded landmark model."""
