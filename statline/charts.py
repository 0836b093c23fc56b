"""Chart registry: named charts, each bundling one or more TimeSeries tracks.

Charts are created from a shared base template plus a per-chart override.
Options are copied field by field when a chart is created, so editing the
template afterwards never reaches charts that already exist.
"""
import logging
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Iterator, List, Optional, Tuple

from .timeseries import TimeSeries

logger = logging.getLogger(__name__)


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"


# Marks an override field the caller did not set (None is a real value: "no bound")
UNSET: Any = _Unset()


@dataclass(frozen=True)
class TrackStyle:
    name: Optional[str] = None
    color: Optional[str] = None
    fill_color: Optional[str] = None


@dataclass
class ChartOptions:
    width: int = 150
    height: int = 33
    chart_type: str = "area"
    y_min: Optional[float] = None
    y_max: Optional[float] = None
    line_width: int = 1
    fill_opacity: float = 0.25
    labels_enabled: bool = False
    tracks: Tuple[TrackStyle, ...] = (TrackStyle(),)


@dataclass(frozen=True)
class ChartOverride:
    width: Any = UNSET
    height: Any = UNSET
    chart_type: Any = UNSET
    y_min: Any = UNSET
    y_max: Any = UNSET
    line_width: Any = UNSET
    fill_opacity: Any = UNSET
    labels_enabled: Any = UNSET
    tracks: Any = UNSET


def build_chart_options(base: ChartOptions, override: Optional[ChartOverride] = None) -> ChartOptions:
    """Return a new ChartOptions where every field set on `override` wins."""
    if override is None:
        return replace(base)
    changes = {}
    for f in fields(ChartOverride):
        value = getattr(override, f.name)
        if value is not UNSET:
            changes[f.name] = tuple(value) if f.name == "tracks" else value
    return replace(base, **changes)


WHITE_TRACK = TrackStyle(color="#FFFFFF")

FIXED_CHARTS: Dict[str, ChartOverride] = {
    "battery": ChartOverride(y_min=0, y_max=100, tracks=(WHITE_TRACK,)),
    "memory": ChartOverride(y_min=0, y_max=None, tracks=(WHITE_TRACK,)),
    "cpu": ChartOverride(y_min=0, y_max=100, tracks=(WHITE_TRACK,)),
    "io": ChartOverride(y_min=0, y_max=None, tracks=(WHITE_TRACK,)),
}

ADAPTER_CHART = ChartOverride(
    y_min=0,
    y_max=None,
    tracks=(
        TrackStyle(name="Download", color="#FFFFFF"),
        TrackStyle(name="Upload", color="#606060", fill_color="rgba(144,144,144,0.25)"),
    ),
)


@dataclass
class ChartEntry:
    key: str
    options: ChartOptions
    tracks: List[TimeSeries] = field(default_factory=list)
    window_start: Optional[float] = None

    def track(self, index: int) -> TimeSeries:
        return self.tracks[index]

    def to_dict(self) -> Dict[str, Any]:
        opts = self.options
        return {
            "key": self.key,
            "size": {"width": opts.width, "height": opts.height},
            "type": opts.chart_type,
            "yAxis": {"min": opts.y_min, "max": opts.y_max},
            "xAxis": {
                "periodStart": int(self.window_start * 1000) if self.window_start is not None else None,
            },
            "lineWidth": opts.line_width,
            "fillOpacity": opts.fill_opacity,
            "labels": opts.labels_enabled,
            "series": [
                {
                    "name": style.name,
                    "color": style.color,
                    "fillColor": style.fill_color,
                    "data": series.to_points(),
                }
                for style, series in zip(opts.tracks, self.tracks)
            ],
        }


class ChartRegistry:
    def __init__(self, template: Optional[ChartOptions] = None):
        self.template = template if template is not None else ChartOptions()
        self._entries: Dict[str, ChartEntry] = {}

    def get_or_create(self, key: str, override: Optional[ChartOverride] = None) -> ChartEntry:
        entry = self._entries.get(key)
        if entry is not None:
            return entry
        options = build_chart_options(self.template, override)
        entry = ChartEntry(
            key=key,
            options=options,
            tracks=[TimeSeries(style.name) for style in options.tracks],
        )
        self._entries[key] = entry
        logger.debug("Created chart %r with %d track(s)", key, len(entry.tracks))
        return entry

    def get(self, key: str) -> Optional[ChartEntry]:
        return self._entries.get(key)

    def keys(self) -> List[str]:
        return list(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[ChartEntry]:
        return iter(list(self._entries.values()))

    def __len__(self) -> int:
        return len(self._entries)
