"""Off-screen rendering of trajectories and metric series with pygame.

Everything here draws onto a :class:`pygame.Surface`; no window or event
loop is involved, so it works under ``SDL_VIDEODRIVER=dummy``.
"""

import numpy as np
import pygame

from .simulation import trajectories

BLACK = (0, 0, 0)
GRID = (100, 100, 100)
TEXT = (200, 200, 200)
BODY_COLORS = [(255, 200, 60), (80, 160, 255), (200, 200, 200)]
SOLVER_COLORS = [
    (255, 100, 100),
    (100, 220, 120),
    (100, 160, 255),
    (240, 200, 80),
    (200, 120, 240),
]


def _font(size=18):
    if not pygame.font.get_init():
        pygame.font.init()
    return pygame.font.Font(None, size)


def _fit(xs, ys, width, height, margin):
    """Map world x/y onto the surface keeping the aspect ratio."""
    x0, x1 = float(np.min(xs)), float(np.max(xs))
    y0, y1 = float(np.min(ys)), float(np.max(ys))
    span = max(x1 - x0, y1 - y0, 1e-300)
    scale = min(width, height) - 2 * margin
    scale = max(scale, 1) / span
    cx, cy = (x0 + x1) / 2, (y0 + y1) / 2

    def to_screen(x, y):
        return (width / 2 + (x - cx) * scale, height / 2 - (y - cy) * scale)

    return to_screen


def draw_trajectories(surface, body_trajectories, colors=None, margin=10, label=None):
    """Draw the x-y projection of every trajectory, fitted to ``surface``.

    Non-finite samples (a run that hit a singularity) are skipped.
    """
    colors = colors or BODY_COLORS
    width, height = surface.get_size()
    finite = [t.positions[np.all(np.isfinite(t.positions), axis=1)] for t in body_trajectories]
    stacked = [p for p in finite if len(p)]
    if not stacked:
        return
    allpts = np.concatenate(stacked)
    to_screen = _fit(allpts[:, 0], allpts[:, 1], width, height, margin)

    for i, pts in enumerate(finite):
        if not len(pts):
            continue
        color = colors[i % len(colors)]
        screen_pts = [to_screen(x, y) for x, y in pts[:, :2]]
        if len(screen_pts) >= 2:
            pygame.draw.lines(surface, color, False, screen_pts, 1)
        end = screen_pts[-1]
        pygame.draw.circle(surface, color, (int(end[0]), int(end[1])), 3)

    if label:
        surface.blit(_font().render(label, True, TEXT), (5, 5))


def draw_metric_series(surface, times, values, color=SOLVER_COLORS[0], label=None, max_value=None):
    """Plot a metric time series with a zero base line at the bottom.

    ``max_value`` fixes the vertical scale so several series drawn on the
    same surface stay comparable.
    """
    times = np.asarray(times, dtype=float)
    values = np.asarray(values, dtype=float)
    mask = np.isfinite(times) & np.isfinite(values)
    times, values = times[mask], values[mask]
    width, height = surface.get_size()
    pygame.draw.line(surface, GRID, (0, height - 1), (width, height - 1), 1)
    if len(values) < 2:
        return

    t0, t1 = times[0], times[-1]
    t_span = (t1 - t0) or 1.0
    top = max_value if max_value is not None else np.max(np.abs(values))
    top = max(top, 1e-300)

    points = [
        ((t - t0) / t_span * (width - 1), (height - 1) - (v / top) * (height - 10))
        for t, v in zip(times, values)
    ]
    pygame.draw.lines(surface, color, False, points, 2)

    if label:
        text = _font().render(f"{label}: {values[-1]:.3e}", True, color)
        surface.blit(text, (10, 5))


def render_comparison(path, results, metric_series, size=(900, 600)):
    """Save a PNG with one trajectory panel per result and a shared panel of
    metric series underneath.

    ``metric_series`` holds one ``(times, values)`` pair per result.
    """
    width, height = size
    canvas = pygame.Surface(size)
    canvas.fill(BLACK)

    n = max(len(results), 1)
    panel_w = width // n
    panel_h = height * 2 // 3
    for i, result in enumerate(results):
        panel = canvas.subsurface(pygame.Rect(i * panel_w, 0, panel_w, panel_h))
        draw_trajectories(panel, trajectories(result), label=result.solver_name)

    chart = canvas.subsurface(pygame.Rect(0, panel_h, width, height - panel_h))
    finite_max = [
        np.max(np.abs(v[np.isfinite(v)])) for _, v in metric_series
        if np.any(np.isfinite(v))
    ]
    top = max(finite_max) if finite_max else 1.0
    for i, ((times, values), result) in enumerate(zip(metric_series, results)):
        draw_metric_series(chart, times, values, SOLVER_COLORS[i % len(SOLVER_COLORS)], max_value=top)
        text = _font(16).render(result.solver_name, True, SOLVER_COLORS[i % len(SOLVER_COLORS)])
        chart.blit(text, (10, 5 + 16 * i))

    pygame.image.save(canvas, str(path))
    return path
