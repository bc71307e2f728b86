"""Render an animation of a satellite on a circular orbit, one PNG per frame."""

from __future__ import annotations

import argparse
import math
from pathlib import Path

from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure

#: Radius of the drawn orbit, in plot units.
ORBIT_RADIUS = 1.5

#: Time for one full revolution, in seconds.
ORBIT_PERIOD_S = 10.0

TIME_START = 0.0
TIME_END = 20.0
TIME_STEP = 0.1

#: Folder the frames are written to by default.
DEFAULT_FOLDER = "orbit_frames"

_FRAME_SIZE_PX = (800, 600)
_DPI = 100
_AXIS_LIMIT = 2.0
_EARTH_RADIUS_PX = 10
_SATELLITE_RADIUS_PX = 5
_CAPTION_SIZE_PX = 30


def satellite_position(time_s: float) -> tuple[float, float]:
    """Return the ``(x, y)`` position of the satellite at ``time_s`` seconds."""
    angular_velocity = 2.0 * math.pi / ORBIT_PERIOD_S
    angle = angular_velocity * time_s
    return ORBIT_RADIUS * math.cos(angle), ORBIT_RADIUS * math.sin(angle)


def frame_times(time_start: float, time_end: float, time_step: float) -> list[float]:
    """Return the time of every frame, stepping from ``time_start`` by ``time_step``.

    The number of frames is ``(time_end - time_start) / time_step`` truncated;
    each time is reached by adding the step to the previous one.
    """
    if time_step <= 0.0:
        raise ValueError("time_step must be positive")
    count = max(int((time_end - time_start) / time_step), 0)
    times: list[float] = []
    current = time_start
    for _ in range(count):
        times.append(current)
        current += time_step
    return times


def _px_to_points(pixels: float) -> float:
    return pixels * 72.0 / _DPI


def render_frames(root_folder: str | Path = DEFAULT_FOLDER) -> list[Path]:
    """Draw every frame of the orbit animation into ``root_folder``; return the paths."""
    folder = Path(root_folder)
    folder.mkdir(parents=True, exist_ok=True)

    times = frame_times(TIME_START, TIME_END, TIME_STEP)
    print(f"Generating {len(times)} frames...")

    width, height = _FRAME_SIZE_PX
    figure = Figure(figsize=(width / _DPI, height / _DPI), dpi=_DPI, facecolor="white")
    FigureCanvasAgg(figure)
    axes = figure.add_subplot()

    paths: list[Path] = []
    for index, current_time in enumerate(times):
        axes.clear()
        sat_x, sat_y = satellite_position(current_time)
        axes.set_title(
            f"Satellite Orbit - Time: {current_time:.2f}s",
            fontsize=_px_to_points(_CAPTION_SIZE_PX),
            fontfamily="sans-serif",
        )
        axes.set_xlim(-_AXIS_LIMIT, _AXIS_LIMIT)
        axes.set_ylim(-_AXIS_LIMIT, _AXIS_LIMIT)
        axes.grid(True)
        axes.plot(
            [0.0], [0.0], "o", color="blue",
            markersize=_px_to_points(2 * _EARTH_RADIUS_PX),
        )
        axes.plot(
            [sat_x], [sat_y], "o", color="red",
            markersize=_px_to_points(2 * _SATELLITE_RADIUS_PX),
        )

        path = folder / f"frame_{index:04d}.png"
        figure.savefig(path, dpi=_DPI, facecolor="white")
        print(f"Generated {path}")
        paths.append(path)
    return paths


def main(argv: list[str] | None = None) -> int:
    """Render the orbit frames into ``orbit_frames`` in the working directory."""
    parser = argparse.ArgumentParser(
        prog="orbit-frames",
        description="Render a circular satellite orbit as a sequence of PNG frames.",
    )
    parser.parse_args(argv)

    render_frames(DEFAULT_FOLDER)

    print("Finished generating frames.")
    print("You can now combine them using ffmpeg, e.g.:")
    print(
        f"ffmpeg -framerate 10 -i {DEFAULT_FOLDER}/frame_%04d.png "
        "-c:v libx264 -pix_fmt yuv420p orbit_animation.mp4"
    )
    return 0