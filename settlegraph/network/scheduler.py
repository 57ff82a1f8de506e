"""
Single-consumer message loop for an interactive network view.

Frame ticks and pointer events are both messages on one asyncio queue and
are handled strictly one at a time, so a drag can never interleave with a
simulation step. The frame loop only enqueues ticks; cancelling its task
is how the view is stabilized or torn down.
"""

import asyncio
import logging
from typing import Annotated, Awaitable, Callable, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter

from settlegraph.core.config import settings
from settlegraph.network.interaction import InteractionController, InteractionMode, Tooltip
from settlegraph.network.layout import LayoutResult, PositionStore, compute_layout
from settlegraph.network.model import GraphModel, ViewMode
from settlegraph.network.render import Scene, build_scene
from settlegraph.network.simulation import TIME_STEP, simulate_step

logger = logging.getLogger(__name__)


class Tick(BaseModel):
    type: Literal["tick"] = "tick"


class PointerDown(BaseModel):
    type: Literal["down"] = "down"
    x: float
    y: float


class PointerDrag(BaseModel):
    """Pointer movement; drags the held node or updates the hover state."""
    type: Literal["move"] = "move"
    x: float
    y: float


class PointerUp(BaseModel):
    type: Literal["up"] = "up"


class PointerLeave(BaseModel):
    type: Literal["leave"] = "leave"


class DoubleClick(BaseModel):
    type: Literal["dblclick"] = "dblclick"
    x: float
    y: float


class Resize(BaseModel):
    """Viewport change; the session graph is laid out again at the new size."""
    type: Literal["resize"] = "resize"
    width: float = Field(..., gt=0)
    height: float = Field(..., gt=0)


class StartFrames(BaseModel):
    type: Literal["start"] = "start"


class StopFrames(BaseModel):
    type: Literal["stop"] = "stop"


class Close(BaseModel):
    type: Literal["close"] = "close"


SessionMessage = Annotated[
    Union[Tick, PointerDown, PointerDrag, PointerUp, PointerLeave, DoubleClick, Resize, StartFrames, StopFrames, Close],
    Field(discriminator="type"),
]
message_adapter = TypeAdapter(SessionMessage)


class FrameUpdate(BaseModel):
    scene: Scene
    tooltip: Tooltip
    interaction: InteractionMode
    running: bool


class NetworkSession:
    def __init__(
        self,
        layout: LayoutResult,
        view_mode: ViewMode = ViewMode.RAW,
        graph: Optional[GraphModel] = None,
        frame_interval: float = TIME_STEP,
        dt: float = TIME_STEP,
    ):
        self.layout = layout
        self.view_mode = view_mode
        self.graph = graph
        self.frame_interval = frame_interval
        self.dt = dt
        self.controller = InteractionController(layout.nodes)
        self.running = False
        self._queue: asyncio.Queue = asyncio.Queue()
        self._frame_task: Optional[asyncio.Task] = None
        self._tick_pending = False

    @property
    def store(self) -> PositionStore:
        """Position store including every drag and simulation step so far."""
        return self.layout.store.with_nodes(self.layout.nodes)

    async def submit(self, message: BaseModel) -> None:
        await self._queue.put(message)

    def frame(self) -> FrameUpdate:
        return FrameUpdate(
            scene=build_scene(self.layout, self.view_mode, self.controller.hovered_id),
            tooltip=self.controller.tooltip,
            interaction=self.controller.mode,
            running=self.running,
        )

    def handle(self, message: BaseModel) -> bool:
        """Apply one message; returns True when a new frame should be drawn."""
        if isinstance(message, Tick):
            self._tick_pending = False
            simulate_step(self.layout.nodes, self.layout.links, self.layout.width, self.layout.height, self.dt)
            return True
        if isinstance(message, PointerDown):
            return self.controller.pointer_down(message.x, message.y)
        if isinstance(message, PointerDrag):
            return self.controller.pointer_move(message.x, message.y)
        if isinstance(message, PointerUp):
            return self.controller.pointer_up()
        if isinstance(message, PointerLeave):
            return self.controller.pointer_leave()
        if isinstance(message, DoubleClick):
            return self.controller.double_click(message.x, message.y)
        if isinstance(message, Resize):
            return self.relayout(message.width, message.height)
        if isinstance(message, StartFrames):
            self.running = True
            self._start_frames()
            return True
        if isinstance(message, StopFrames):
            self.running = False
            self._stop_frames()
            return True
        return False

    def relayout(self, width: float, height: float) -> bool:
        """
        Lay the session graph out again, keeping velocities and pins.

        A node held by the pointer stays where it is.
        """
        if self.graph is None:
            return False
        width = max(settings.MIN_VIEWPORT_WIDTH, width)
        height = max(settings.MIN_VIEWPORT_HEIGHT, height)
        self.layout = compute_layout(
            self.graph, width, height, self.store,
            dragging_id=self.controller.dragging_id
        )
        self.controller.replace_nodes(self.layout.nodes)
        return True

    async def run(self, on_frame: Callable[[FrameUpdate], Awaitable[None]]) -> None:
        """Consume messages until Close, emitting a frame after every change."""
        await on_frame(self.frame())
        try:
            while True:
                message = await self._queue.get()
                if isinstance(message, Close):
                    break
                if self.handle(message):
                    await on_frame(self.frame())
        finally:
            self.running = False
            self._stop_frames()

    def _start_frames(self) -> None:
        if self._frame_task is None:
            self._frame_task = asyncio.create_task(self._frame_loop())
            logger.debug("Frame loop started")

    def _stop_frames(self) -> None:
        if self._frame_task is not None:
            self._frame_task.cancel()
            self._frame_task = None
            logger.debug("Frame loop stopped")

    async def _frame_loop(self) -> None:
        while True:
            await asyncio.sleep(self.frame_interval)
            if not self._tick_pending:
                self._tick_pending = True
                await self._queue.put(Tick())
