# loanmap/animation.py
"""
Playback of the yearly maps.

The controller renders one year per tick while autoplaying, pauses on the
last year, then hands the map over to a year slider. The handoff happens once
per session and never goes back to autoplay.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence, Union

from loanmap.aggregation import year_key
from loanmap.constants import (
    ANIMATION_YEARS, PAUSE_SECONDS, SLIDER_MAX_YEAR, SLIDER_MIN_YEAR,
    SUMMARY_TEXT, TICK_SECONDS,
)
from loanmap.pipeline import PipelineResult
from loanmap.renderer import ChoroplethRenderer, RenderedMap
from loanmap.scheduling import Scheduler, TimerHandle

logger = logging.getLogger(__name__)


class PlaybackStateError(RuntimeError):
    """An operation was requested in a playback state that does not allow it."""


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Autoplaying:
    year_index: int


@dataclass(frozen=True)
class TransitioningToInteractive:
    pass


@dataclass(frozen=True)
class Interactive:
    selected_year: int


PlaybackState = Union[Idle, Autoplaying, TransitioningToInteractive, Interactive]


class PlaybackView(Protocol):
    """Page elements the controller shows and hides around the map."""

    def show_year_label(self, year: int) -> None: ...

    def hide_year_label(self) -> None: ...

    def show_slider(self, min_year: int, max_year: int, value: int) -> None: ...

    def show_summary(self, text: str) -> None: ...


@dataclass(frozen=True)
class PlaybackConfig:
    years: Sequence[int] = tuple(ANIMATION_YEARS)
    tick_seconds: float = TICK_SECONDS
    pause_seconds: float = PAUSE_SECONDS
    slider_min: int = SLIDER_MIN_YEAR
    slider_max: int = SLIDER_MAX_YEAR
    summary_text: str = SUMMARY_TEXT

    def __post_init__(self):
        if not self.years:
            raise ValueError("Playback needs at least one year")
        if list(self.years) != sorted(self.years):
            raise ValueError("Playback years must be in ascending order")
        if self.tick_seconds <= 0 or self.pause_seconds < 0:
            raise ValueError("Tick interval must be positive and pause non-negative")
        if self.slider_min > self.slider_max:
            raise ValueError(f"Slider range {self.slider_min}-{self.slider_max} is empty")
        # the slider opens on the last autoplayed year, so every year must be selectable
        outside = [y for y in self.years if not self.slider_min <= y <= self.slider_max]
        if outside:
            raise ValueError(f"Years {outside} are outside the slider range "
                             f"{self.slider_min}-{self.slider_max}")

    @property
    def last_year(self) -> int:
        return self.years[-1]


class AnimationController:
    """
    Owns the playback state machine:

        Idle -> Autoplaying(i) -> ... -> TransitioningToInteractive -> Interactive(year)

    Every render goes through the shared ChoroplethRenderer with the
    pipeline's index and colour scale; nothing is recomputed.
    """

    def __init__(self, pipeline: PipelineResult, renderer: ChoroplethRenderer,
                 scheduler: Scheduler, view: PlaybackView,
                 config: Optional[PlaybackConfig] = None):
        self.pipeline = pipeline
        self.renderer = renderer
        self.scheduler = scheduler
        self.view = view
        self.config = config or PlaybackConfig()
        self.state: PlaybackState = Idle()
        self.last_rendered: Optional[RenderedMap] = None
        self._tick_handle: Optional[TimerHandle] = None
        self._pause_handle: Optional[TimerHandle] = None

    @property
    def years(self) -> Sequence[int]:
        return self.config.years

    def _render(self, year: int) -> RenderedMap:
        p = self.pipeline
        self.last_rendered = self.renderer.render(p.index, p.geometry, year, p.scale)
        return self.last_rendered

    def start(self) -> None:
        """Shows the first year of the data, then begins the timed countdown."""
        if not isinstance(self.state, Idle):
            raise PlaybackStateError(f"Playback already started ({self.state})")

        first = self.pipeline.index.first_year()
        if first is not None:
            self._render(first)
        self.state = Autoplaying(0)
        self._tick_handle = self.scheduler.call_later(self.config.tick_seconds, self._tick)
        logger.info("Autoplay started over %d years", len(self.years))

    def _tick(self) -> None:
        self._tick_handle = None
        if not isinstance(self.state, Autoplaying):
            return

        idx = self.state.year_index
        year = self.years[idx]
        self._render(year)
        self.view.show_year_label(year)

        if idx == len(self.years) - 1:
            self.state = TransitioningToInteractive()
            self._pause_handle = self.scheduler.call_later(self.config.pause_seconds, self._finish)
            return

        self.state = Autoplaying(idx + 1)
        self._tick_handle = self.scheduler.call_later(self.config.tick_seconds, self._tick)

    def _cancel_tick(self) -> None:
        if self._tick_handle is not None:
            self._tick_handle.cancel()
            self._tick_handle = None

    def _finish(self) -> None:
        self._pause_handle = None
        if not isinstance(self.state, TransitioningToInteractive):
            return
        self._cancel_tick()

        cfg = self.config
        self.view.hide_year_label()
        self.state = Interactive(cfg.last_year)
        self.view.show_slider(cfg.slider_min, cfg.slider_max, cfg.last_year)
        self.view.show_summary(cfg.summary_text)
        logger.info("Autoplay finished; slider enabled")

    def select_year(self, year: Union[int, str]) -> RenderedMap:
        """Renders a slider-selected year. Only valid once playback is interactive."""
        if not isinstance(self.state, Interactive):
            raise PlaybackStateError(f"Year selection is not available while {type(self.state).__name__}")
        year = year_key(year)
        cfg = self.config
        if not cfg.slider_min <= year <= cfg.slider_max:
            raise ValueError(f"Year {year} is outside {cfg.slider_min}-{cfg.slider_max}")
        rendered = self._render(year)
        self.state = Interactive(year)
        return rendered

    @property
    def is_interactive(self) -> bool:
        return isinstance(self.state, Interactive)
