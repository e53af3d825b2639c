"""Affine transforms between pointer coordinates and canvas coordinates."""
from __future__ import annotations

from typing import Iterable, Tuple

import numpy as np

from graphview.contracts import Position
from graphview.exceptions import TransformError

_SINGULAR_EPSILON = 1e-12


class AffineTransform:
    """Immutable 2D affine transform backed by a 3x3 homogeneous matrix."""

    __slots__ = ("_matrix",)

    def __init__(self, matrix: Iterable[Iterable[float]]) -> None:
        array = np.array(matrix, dtype=float)
        if array.shape != (3, 3):
            raise TransformError(f"Affine matrix must be 3x3, got {array.shape}")
        if not np.allclose(array[2], (0.0, 0.0, 1.0)):
            raise TransformError("Affine matrix must keep the homogeneous row [0, 0, 1]")
        array.setflags(write=False)
        self._matrix = array

    @classmethod
    def identity(cls) -> "AffineTransform":
        return cls(np.identity(3))

    @classmethod
    def from_components(cls, a: float, b: float, c: float, d: float, e: float, f: float) -> "AffineTransform":
        """Build a transform from SVG/DOMMatrix style components.

        The resulting mapping is ``x' = a*x + c*y + e`` and
        ``y' = b*x + d*y + f``.
        """

        return cls(((a, c, e), (b, d, f), (0.0, 0.0, 1.0)))

    @classmethod
    def translation(cls, tx: float, ty: float) -> "AffineTransform":
        return cls.from_components(1.0, 0.0, 0.0, 1.0, tx, ty)

    @classmethod
    def scaling(cls, sx: float, sy: float | None = None) -> "AffineTransform":
        return cls.from_components(sx, 0.0, 0.0, sx if sy is None else sy, 0.0, 0.0)

    @property
    def matrix(self) -> np.ndarray:
        """Return the read-only homogeneous matrix."""

        return self._matrix

    @property
    def components(self) -> Tuple[float, float, float, float, float, float]:
        """Return the ``(a, b, c, d, e, f)`` components."""

        m = self._matrix
        return (float(m[0, 0]), float(m[1, 0]), float(m[0, 1]), float(m[1, 1]), float(m[0, 2]), float(m[1, 2]))

    @property
    def determinant(self) -> float:
        return float(np.linalg.det(self._matrix[:2, :2]))

    def then(self, other: "AffineTransform") -> "AffineTransform":
        """Return a transform applying ``self`` first and ``other`` second."""

        return type(self)(other.matrix @ self._matrix)

    def inverse(self) -> "AffineTransform":
        """Return the inverse transform.

        Raises:
            TransformError: If the matrix is singular.
        """

        if abs(self.determinant) < _SINGULAR_EPSILON:
            raise TransformError("Transform is not invertible")
        return AffineTransform(np.linalg.inv(self._matrix))

    def apply(self, x: float, y: float) -> Position:
        """Map the point ``(x, y)`` through the transform."""

        result = self._matrix @ np.array((x, y, 1.0))
        return Position(x=float(result[0]), y=float(result[1]))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AffineTransform):
            return NotImplemented
        return bool(np.allclose(self._matrix, other.matrix))

    def __hash__(self) -> int:
        return hash(tuple(round(value, 9) for value in self.components))

    def __repr__(self) -> str:
        a, b, c, d, e, f = self.components
        return f"{type(self).__name__}(a={a:g}, b={b:g}, c={c:g}, d={d:g}, e={e:g}, f={f:g})"


class ScreenToCanvasTransform(AffineTransform):
    """Map device-space pointer coordinates into canvas coordinates.

    Device pixel ratio, pan/zoom and the canvas origin offset are all folded
    into the matrix, so callers never assume a 1:1 pixel mapping.
    """

    @classmethod
    def from_screen_ctm(cls, a: float, b: float, c: float, d: float, e: float, f: float) -> "ScreenToCanvasTransform":
        """Invert a canvas-to-screen CTM such as ``SVGGraphicsElement.getScreenCTM()``."""

        canvas_to_screen = AffineTransform.from_components(a, b, c, d, e, f)
        return cls(canvas_to_screen.inverse().matrix)

    @classmethod
    def from_viewport(
        cls,
        *,
        canvas_width: float,
        canvas_height: float,
        client_left: float,
        client_top: float,
        client_width: float,
        client_height: float,
        device_pixel_ratio: float = 1.0,
        pan_x: float = 0.0,
        pan_y: float = 0.0,
        zoom: float = 1.0,
    ) -> "ScreenToCanvasTransform":
        """Build the transform for a canvas letterboxed into a client rectangle.

        The canvas keeps its aspect ratio (``xMidYMid meet``), is zoomed
        about its top-left corner, panned in CSS pixels, positioned at the
        client rectangle origin and finally scaled by the device pixel
        ratio.

        Raises:
            TransformError: If any dimension, the zoom or the pixel ratio is
                not positive.
        """

        if min(canvas_width, canvas_height, client_width, client_height) <= 0:
            raise TransformError("Canvas and client dimensions must be positive")
        if zoom <= 0 or device_pixel_ratio <= 0:
            raise TransformError("Zoom and device pixel ratio must be positive")
        fit = min(client_width / canvas_width, client_height / canvas_height)
        offset_x = (client_width - canvas_width * fit) / 2.0
        offset_y = (client_height - canvas_height * fit) / 2.0
        canvas_to_screen = (
            AffineTransform.scaling(fit * zoom)
            .then(AffineTransform.translation(client_left + offset_x + pan_x, client_top + offset_y + pan_y))
            .then(AffineTransform.scaling(device_pixel_ratio))
        )
        return cls(canvas_to_screen.inverse().matrix)

    def to_canvas(self, screen_x: float, screen_y: float) -> Position:
        return self.apply(screen_x, screen_y)


__all__ = ["AffineTransform", "ScreenToCanvasTransform"]
