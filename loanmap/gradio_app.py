# loanmap/gradio_app.py
"""
LoanMap Gradio Application
Animated loan-density choropleth: autoplay through the years, then a year slider.
"""

import asyncio
import logging
import os
from functools import lru_cache

import gradio as gr
import pandas as pd

from loanmap.animation import AnimationController, PlaybackConfig, PlaybackStateError
from loanmap.constants import (
    COLUMN_NAMES, DEFAULT_GEO_PATH, DEFAULT_RECORDS_PATH, ENV_GEO_PATH,
    ENV_PAUSE_SECONDS, ENV_RECORDS_PATH, ENV_TICK_SECONDS, PAGE_TITLE,
    PAUSE_SECONDS, SLIDER_MAX_YEAR, SLIDER_MIN_YEAR, SLIDER_START_YEAR,
    SUMMARY_TITLE, TICK_SECONDS,
)
from loanmap.pipeline import LoadJoinError, PipelineResult, build_pipeline
from loanmap.plotting import FigureSurface
from loanmap.renderer import ChoroplethRenderer
from loanmap.scale import EmptyDomainScaleError
from loanmap.scheduling import AsyncioScheduler

RECORDS_PATH = os.environ.get(ENV_RECORDS_PATH, DEFAULT_RECORDS_PATH)
GEO_PATH = os.environ.get(ENV_GEO_PATH, DEFAULT_GEO_PATH)
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level=logging.INFO) -> None:
    """Send the loader and playback log records to the console."""
    logging.basicConfig(level=level, format=LOG_FORMAT)


def _env_seconds(name: str, default: float) -> float:
    raw = os.environ.get(name, "")
    if not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        print(f"[WARN] Ignoring {name}={raw!r}; using {default}s")
        return default


def playback_config() -> PlaybackConfig:
    return PlaybackConfig(
        tick_seconds=_env_seconds(ENV_TICK_SECONDS, TICK_SECONDS),
        pause_seconds=_env_seconds(ENV_PAUSE_SECONDS, PAUSE_SECONDS),
    )


@lru_cache(maxsize=1)
def load_pipeline(records_path: str, geo_path: str) -> PipelineResult:
    """Loads and aggregates once per process; the result is immutable and shared."""
    return build_pipeline(records_path, geo_path)


def stats_table(pipeline: PipelineResult) -> pd.DataFrame:
    df = pipeline.index.to_frame()
    df = df[df["region"] != ""].sort_values(["year", "region"]).reset_index(drop=True)
    return df.rename(columns=COLUMN_NAMES)


class QueuePlaybackView:
    """Forwards controller events to the page generator through an asyncio queue."""

    def __init__(self, surface: FigureSurface, queue: asyncio.Queue):
        self.surface = surface
        self.queue = queue

    def show_year_label(self, year: int) -> None:
        # The surface already holds the figure for this year
        self.queue.put_nowait(("frame", {"figure": self.surface.figure, "year": year}))

    def hide_year_label(self) -> None:
        self.queue.put_nowait(("hide_label", None))

    def show_slider(self, min_year: int, max_year: int, value: int) -> None:
        self.queue.put_nowait(("slider", {"min": min_year, "max": max_year, "value": value}))

    def show_summary(self, text: str) -> None:
        self.queue.put_nowait(("summary", text))


async def run_autoplay(progress=gr.Progress()):
    """Loads the data, plays every year once, then reveals the slider and summary."""
    def progress_wrapper(p, msg):
        progress(p, desc=msg)

    try:
        pipeline = await asyncio.to_thread(load_pipeline, RECORDS_PATH, GEO_PATH)
    except (LoadJoinError, EmptyDomainScaleError) as e:
        raise gr.Error(f"Error loading data: {str(e)}")
    progress_wrapper(1.0, "Ready")

    queue: asyncio.Queue = asyncio.Queue()
    surface = FigureSurface(pipeline.geometry, title=PAGE_TITLE)
    renderer = ChoroplethRenderer(pipeline.registry, surface)
    controller = AnimationController(
        pipeline, renderer, AsyncioScheduler(), QueuePlaybackView(surface, queue), playback_config()
    )
    session = {"controller": controller, "pipeline": pipeline}

    controller.start()
    yield (surface.figure, gr.update(visible=False), gr.update(visible=False),
           gr.update(visible=False), stats_table(pipeline), session)

    while True:
        kind, payload = await queue.get()
        if kind == "frame":
            yield (payload["figure"], gr.update(value=f"# {payload['year']}", visible=True),
                   gr.update(), gr.update(), gr.update(), session)
        elif kind == "hide_label":
            yield (gr.update(), gr.update(value="", visible=False),
                   gr.update(), gr.update(), gr.update(), session)
        elif kind == "slider":
            yield (gr.update(), gr.update(),
                   gr.update(minimum=payload["min"], maximum=payload["max"], value=payload["value"], visible=True),
                   gr.update(), gr.update(), session)
        elif kind == "summary":
            yield (gr.update(), gr.update(), gr.update(),
                   gr.update(value=f"## {SUMMARY_TITLE}\n\n{payload}", visible=True), gr.update(), session)
            break


def on_year_change(year, session):
    """Re-render the map for the slider year with the already-built aggregate and scale."""
    if not session or not session.get("controller"):
        return gr.update(), session

    controller: AnimationController = session["controller"]
    if not controller.is_interactive:
        return gr.update(), session

    try:
        controller.select_year(int(year))
    except (PlaybackStateError, ValueError) as e:
        raise gr.Error(f"Cannot show {year}: {str(e)}")

    return controller.renderer.surface.figure, session


# ===================== BUILD GRADIO UI =====================

css = """
#countdown h1 {
    font-size: 48px;
    text-align: center;
    margin: 0;
}

#map-container {
    width: 100%;
    min-height: 400px;
}
"""

with gr.Blocks(title="LoanMap", css=css) as app:

    session_state = gr.State()

    gr.Markdown(f"# {PAGE_TITLE}")

    with gr.Tabs():
        with gr.Tab("🗺️ Map"):
            map_out = gr.Plot(label="Loan Density", elem_id="map-container")
            year_label = gr.Markdown(visible=False, elem_id="countdown")
            year_slider = gr.Slider(
                minimum=SLIDER_MIN_YEAR, maximum=SLIDER_MAX_YEAR, step=1, value=SLIDER_START_YEAR,
                label="Year", visible=False,
                info="Select a year to explore loan density by state.",
            )
            summary_out = gr.Markdown(visible=False)

        with gr.Tab("📊 Data"):
            stats_out = gr.DataFrame(label="Loan Totals by Year and State")

    app.load(
        run_autoplay,
        inputs=None,
        outputs=[map_out, year_label, year_slider, summary_out, stats_out, session_state],
    )

    year_slider.change(
        on_year_change,
        inputs=[year_slider, session_state],
        outputs=[map_out, session_state],
    )

if __name__ == "__main__":
    app.launch(theme=gr.themes.Soft())
