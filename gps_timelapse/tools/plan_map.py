"""Render a clip plan on an interactive map."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

import folium  # Using folium to build an interactive Leaflet map.
import numpy as np

from ..models import ClipAssignment, Track

LatLon = Tuple[float, float]
PathLike = Union[str, Path]

_MASTER_COLOR = "#636363"
_RATING_COLORS = {
    "Excellent": "#1a9641",
    "Good": "#2c7bb6",
    "Fair": "#fdae61",
    "Poor": "#d7191c",
    "Unusable": "#7b3294",
}


def clip_path(track: Track, clip: ClipAssignment) -> List[LatLon]:
    """Return the coordinates a clip covers on its source track."""

    mask = (track.times >= clip.extract_start) & (track.times <= clip.extract_end)
    indices = np.nonzero(mask)[0]
    return [(float(track.lats[i]), float(track.lons[i])) for i in indices]


def create_plan_map(
    tracks: Sequence[Track],
    clips: Sequence[ClipAssignment],
    master_track: str,
    *,
    output_html_path: Optional[PathLike] = None,
) -> folium.Map:
    """Create a map showing the reference path and every scheduled clip.

    Args:
        tracks: All source tracks referenced by ``clips``.
        clips: Ordered clip plan produced by the scheduler.
        master_track: Identifier of the reference track drawn underneath.
        output_html_path: Optional path to persist the map as an HTML file.

    Returns:
        A :class:`folium.Map` instance containing the overlay.

    Raises:
        ValueError: If ``master_track`` or a clip's source is not in ``tracks``.
    """

    by_id: Dict[str, Track] = {track.track_id: track for track in tracks}
    master = by_id.get(master_track)
    if master is None:
        raise ValueError(f"Unknown master track '{master_track}'")

    master_points = list(zip(master.lats.tolist(), master.lons.tolist()))
    folium_map = folium.Map(location=master_points[0], zoom_start=15, control_scale=True)
    folium.PolyLine(
        master_points,
        color=_MASTER_COLOR,
        weight=3,
        opacity=0.6,
        tooltip=f"Reference: {master_track}",
    ).add_to(folium_map)

    for clip in clips:
        source = by_id.get(clip.source_track)
        if source is None:
            raise ValueError(f"Clip {clip.clip_index} references unknown track")
        points = clip_path(source, clip)
        if not points:
            continue
        color = _RATING_COLORS.get(clip.rating.value, _MASTER_COLOR)
        tooltip = (
            f"Clip {clip.clip_index}: {clip.source_track} "
            f"{clip.extract_start:.1f}s (+{clip.extract_duration:.1f}s) "
            f"{clip.rating.value}"
        )
        if len(points) >= 2:
            folium.PolyLine(
                points, color=color, weight=5, opacity=0.9, tooltip=tooltip
            ).add_to(folium_map)
        folium.CircleMarker(
            location=points[0],
            radius=4,
            color=color,
            fill=True,
            fill_color=color,
            tooltip=tooltip,
        ).add_to(folium_map)

    if output_html_path is not None:
        output_path = Path(output_html_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        folium_map.save(str(output_path))

    return folium_map


__all__ = ["clip_path", "create_plan_map"]
