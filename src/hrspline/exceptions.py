"""Exception and warning classes for hrspline.

Every fatal error derives from HRSplineError so callers can catch the
package's failures in one clause. They also derive from ValueError, since
each one describes bad input rather than a failure of the machinery.
"""


class HRSplineError(Exception):
    """Base class for all hrspline errors."""


class MissingRequiredInputError(HRSplineError, ValueError):
    """Raised when x, the fitted model, the x-axis label or the title is absent."""


class InsufficientDataError(HRSplineError, ValueError):
    """Raised when fewer than four distinct exposure values remain.

    A cubic smoothing spline needs at least four distinct abscissae to be
    numerically stable.
    """


class InvalidRangeError(HRSplineError, ValueError):
    """Raised when an axis range is empty, constant or non-finite."""


class LengthMismatchError(HRSplineError, ValueError):
    """Raised when exposure values and term predictions cannot be paired."""


class LegendExtractionWarning(UserWarning):
    """Issued when the spline term's p-value cannot be read from the model."""


class BandOrderingWarning(UserWarning):
    """Issued when smoothing leaves lower <= center <= upper violated somewhere.

    Each bound is smoothed independently, so with very few observations the
    smoothed curves can cross. The values are reported as computed.
    """
