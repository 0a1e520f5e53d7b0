"""Small image-processing toolkit used for eye-region analysis.

Images are numpy arrays: grayscale images are 2-D ``uint8`` arrays and
colour images are ``(rows, cols, 3)`` arrays in BGR channel order.
Contours are ``(N, 2)`` integer arrays of ``(x, y)`` points.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
from scipy import ndimage

__all__ = [
    "Point",
    "to_gray",
    "gaussian_blur",
    "otsu_threshold",
    "adaptive_mean_threshold",
    "find_external_contours",
    "contour_area",
    "contour_centroid",
    "largest_contour",
    "hough_circles",
]

# Clockwise neighbour order in image coordinates (y grows downwards).
_DIRS = [(1, 0), (1, 1), (0, 1), (-1, 1), (-1, 0), (-1, -1), (0, -1), (1, -1)]


@dataclass(frozen=True)
class Point:
    """A 2-D point or direction vector."""

    x: float
    y: float

    def magnitude(self) -> float:
        """Euclidean length of the vector."""
        return math.hypot(self.x, self.y)


def to_gray(image: np.ndarray) -> np.ndarray:
    """Convert a BGR image to grayscale; grayscale input is copied."""
    image = np.asarray(image)
    if image.ndim == 2:
        return image.astype(np.uint8, copy=True)
    if image.ndim == 3 and image.shape[2] == 3:
        b, g, r = (image[..., i].astype(np.float64) for i in range(3))
        gray = 0.114 * b + 0.587 * g + 0.299 * r
        return np.clip(np.rint(gray), 0, 255).astype(np.uint8)
    raise ValueError(f"unsupported image shape {image.shape}")


def gaussian_blur(gray: np.ndarray, ksize: int, sigma: float) -> np.ndarray:
    """Blur with a square Gaussian kernel; ``sigma <= 0`` derives it from ``ksize``."""
    if ksize < 1 or ksize % 2 == 0:
        raise ValueError("kernel size must be a positive odd number")
    if sigma <= 0:
        sigma = 0.3 * ((ksize - 1) * 0.5 - 1) + 0.8
    radius = ksize // 2
    blurred = ndimage.gaussian_filter(
        np.asarray(gray, dtype=np.float64), sigma, mode="mirror", truncate=radius / sigma
    )
    return np.clip(np.rint(blurred), 0, 255).astype(np.uint8)


def otsu_threshold(gray: np.ndarray) -> np.ndarray:
    """Binarise with Otsu's automatically chosen threshold (0 or 255 output)."""
    gray = np.asarray(gray, dtype=np.uint8)
    hist = np.bincount(gray.ravel(), minlength=256).astype(np.float64)
    total = hist.sum()
    levels = np.arange(256, dtype=np.float64)
    weight_low = np.cumsum(hist)
    weight_high = total - weight_low
    sum_low = np.cumsum(hist * levels)
    sum_all = sum_low[-1]
    with np.errstate(divide="ignore", invalid="ignore"):
        mean_low = sum_low / weight_low
        mean_high = (sum_all - sum_low) / weight_high
        between = weight_low * weight_high * (mean_low - mean_high) ** 2
    between = np.where((weight_low > 0) & (weight_high > 0), between, -1.0)
    threshold = int(np.argmax(between)) if between.max() >= 0 else 0
    return np.where(gray > threshold, 255, 0).astype(np.uint8)


def adaptive_mean_threshold(gray: np.ndarray, block_size: int, c: float) -> np.ndarray:
    """Pixels brighter than their neighbourhood mean minus ``c`` become 255."""
    if block_size < 3 or block_size % 2 == 0:
        raise ValueError("block size must be an odd number greater than 1")
    gray = np.asarray(gray, dtype=np.float64)
    mean = ndimage.uniform_filter(gray, size=block_size, mode="nearest")
    return np.where(gray > mean - c, 255, 0).astype(np.uint8)


def _trace_boundary(mask: np.ndarray, sx: int, sy: int) -> list[tuple[int, int]]:
    start = (sx, sy)
    points = [start]
    p = start
    back = 4
    first_move = None
    while True:
        for k in range(8):
            d = (back + 1 + k) % 8
            q = (p[0] + _DIRS[d][0], p[1] + _DIRS[d][1])
            if mask[q[1], q[0]]:
                break
        else:
            return points
        prev = _DIRS[(d - 1) % 8]
        c = (p[0] + prev[0], p[1] + prev[1])
        if first_move is None:
            first_move = q
        elif p == start and q == first_move:
            break
        points.append(q)
        back = _DIRS.index((c[0] - q[0], c[1] - q[1]))
        p = q
    return points[:-1] if len(points) > 1 else points


def _simplify(points: list[tuple[int, int]]) -> list[tuple[int, int]]:
    if len(points) <= 2:
        return points
    n = len(points)

    def step(a, b):
        return (int(np.sign(b[0] - a[0])), int(np.sign(b[1] - a[1])))

    return [
        pt
        for i, pt in enumerate(points)
        if step(points[i - 1], pt) != step(pt, points[(i + 1) % n])
    ]


def find_external_contours(binary: np.ndarray) -> list[np.ndarray]:
    """Outer boundaries of the non-zero regions, with straight runs compressed."""
    mask = np.asarray(binary) != 0
    labels, count = ndimage.label(mask, structure=np.ones((3, 3), dtype=int))
    if count == 0:
        return []
    found = []
    for index, region in enumerate(ndimage.find_objects(labels), start=1):
        sub = labels[region] == index
        padded = np.pad(sub, 1)
        ys, xs = np.nonzero(padded)
        order = np.lexsort((xs, ys))
        sx, sy = int(xs[order[0]]), int(ys[order[0]])
        traced = _simplify(_trace_boundary(padded, sx, sy))
        ox, oy = region[1].start - 1, region[0].start - 1
        contour = np.array([(x + ox, y + oy) for x, y in traced], dtype=np.int64)
        found.append((sy + oy, sx + ox, contour))
    found.sort(key=lambda item: (item[0], item[1]))
    return [contour for _, _, contour in found]


def _polygon_terms(contour: np.ndarray):
    pts = np.asarray(contour, dtype=np.float64).reshape(-1, 2)
    x, y = pts[:, 0], pts[:, 1]
    xn, yn = np.roll(x, -1), np.roll(y, -1)
    return x, y, xn, yn, x * yn - xn * y


def contour_area(contour: np.ndarray) -> float:
    """Area enclosed by the polygon through the contour points."""
    *_, cross = _polygon_terms(contour)
    return abs(float(cross.sum())) / 2.0


def contour_centroid(contour: np.ndarray) -> Point | None:
    """Centroid from polygon moments, or ``None`` for a zero-area contour."""
    x, y, xn, yn, cross = _polygon_terms(contour)
    m00 = cross.sum() / 2.0
    if m00 == 0:
        return None
    m10 = ((x + xn) * cross).sum() / 6.0
    m01 = ((y + yn) * cross).sum() / 6.0
    return Point(float(m10 / m00), float(m01 / m00))


def largest_contour(contours: list[np.ndarray]) -> np.ndarray:
    """The contour with the largest area; the first one wins ties."""
    if not contours:
        raise ValueError("no contours given")
    return max(contours, key=contour_area)


def hough_circles(
    gray: np.ndarray,
    min_dist: float,
    canny_high: float,
    accumulator_threshold: int,
    min_radius: int,
    max_radius: int,
) -> list[tuple[float, float, float]]:
    """Detect circles by gradient voting; returns ``(x, y, radius)`` strongest first."""
    if accumulator_threshold <= 0:
        raise ValueError("accumulator threshold must be positive")
    image = np.asarray(gray, dtype=np.float64)
    rows, cols = image.shape
    gx = ndimage.sobel(image, axis=1)
    gy = ndimage.sobel(image, axis=0)
    magnitude = np.hypot(gx, gy)
    ys, xs = np.nonzero(magnitude >= canny_high)
    if xs.size == 0:
        return []
    ux = gx[ys, xs] / magnitude[ys, xs]
    uy = gy[ys, xs] / magnitude[ys, xs]
    r_min = max(int(min_radius), 1)
    r_max = int(max_radius) if max_radius > 0 else max(rows, cols) // 2
    if r_max < r_min:
        return []

    acc = np.zeros((rows, cols), dtype=np.int64)
    for r in range(r_min, r_max + 1):
        for sign in (1, -1):
            cx = np.rint(xs + sign * r * ux).astype(np.int64)
            cy = np.rint(ys + sign * r * uy).astype(np.int64)
            ok = (cx >= 0) & (cx < cols) & (cy >= 0) & (cy < rows)
            np.add.at(acc, (cy[ok], cx[ok]), 1)

    peaks = (acc >= accumulator_threshold) & (acc == ndimage.maximum_filter(acc, size=3))
    py, px = np.nonzero(peaks)
    order = sorted(range(px.size), key=lambda i: (-acc[py[i], px[i]], py[i], px[i]))
    spacing = max(float(min_dist), 1.0)
    circles: list[tuple[float, float, float]] = []
    for i in order:
        cx, cy = float(px[i]), float(py[i])
        if any(math.hypot(cx - ox, cy - oy) < spacing for ox, oy, _ in circles):
            continue
        dist = np.rint(np.hypot(xs - cx, ys - cy)).astype(np.int64)
        dist = dist[(dist >= r_min) & (dist <= r_max)]
        if dist.size == 0:
            continue
        circles.append((cx, cy, float(np.argmax(np.bincount(dist)))))
    return circles