import logging
from typing import Dict, Optional, Tuple

from settlegraph.core.auth import CurrentUser
from settlegraph.core.config import settings
from settlegraph.network.layout import LayoutResult, PositionStore, compute_layout
from settlegraph.network.model import GraphModel, ViewContext, ViewMode, build_graph
from settlegraph.network.render import Scene, build_scene
from settlegraph.network.scheduler import NetworkSession
from settlegraph.schemas.settlement import OptimizationResult
from settlegraph.services.settlement_service import SettlementService
from settlegraph.services.transaction_service import TransactionService

logger = logging.getLogger(__name__)


def clamp_viewport(width: Optional[float], height: Optional[float]) -> Tuple[float, float]:
    width = width or settings.VIEWPORT_WIDTH
    height = height or settings.VIEWPORT_HEIGHT
    return max(settings.MIN_VIEWPORT_WIDTH, width), max(settings.MIN_VIEWPORT_HEIGHT, height)


class NetworkService:
    """
    Owns the per-viewer view context and node position store.

    Nothing else holds view state: endpoints ask this service for layouts
    and hand the resulting stores back after interactive sessions.
    """

    def __init__(self):
        self._contexts: Dict[str, ViewContext] = {}
        self._stores: Dict[str, PositionStore] = {}

    def context_for(self, username: str) -> ViewContext:
        return self._contexts.get(username, ViewContext())

    def reset_view_modes(self) -> None:
        """Back to raw for everyone, e.g. after the transaction set changed."""
        self._contexts.clear()

    def remember(self, username: str, store: PositionStore) -> None:
        self._stores[username] = store

    async def toggle_optimize(self, user: CurrentUser) -> OptimizationResult:
        """
        Switch between raw and optimized views.

        Entering optimized mode nets the viewer's transactions and caches
        the edges for later graph builds; leaving it returns no instructions.
        """
        context = self.context_for(user.username)
        if context.view_mode == ViewMode.OPTIMIZED:
            self._contexts[user.username] = context.reset()
            return OptimizationResult()

        transactions = await TransactionService.list_for_viewer(user)
        result = SettlementService.optimize(transactions)
        self._contexts[user.username] = ViewContext(
            view_mode=ViewMode.OPTIMIZED,
            cached_optimized_edges=result.edges,
        )
        logger.info("Optimized view for %s: %d payments", user.username, len(result.edges))
        return result

    async def graph_for(
        self,
        user: CurrentUser,
        mode: Optional[ViewMode] = None,
    ) -> Tuple[GraphModel, ViewMode]:
        context = self.context_for(user.username)
        if mode is not None and mode != context.view_mode:
            context = ViewContext(view_mode=mode)

        transactions = await TransactionService.list_for_viewer(user)
        return build_graph(transactions, context), context.view_mode

    async def layout_for(
        self,
        user: CurrentUser,
        width: Optional[float] = None,
        height: Optional[float] = None,
        mode: Optional[ViewMode] = None,
    ) -> Tuple[LayoutResult, ViewMode]:
        graph, view_mode = await self.graph_for(user, mode)
        return self._layout(user, graph, width, height), view_mode

    def _layout(
        self,
        user: CurrentUser,
        graph: GraphModel,
        width: Optional[float],
        height: Optional[float],
    ) -> LayoutResult:
        width, height = clamp_viewport(width, height)
        layout = compute_layout(graph, width, height, self._stores.get(user.username))
        self._stores[user.username] = layout.store
        return layout

    async def scene_for(
        self,
        user: CurrentUser,
        width: Optional[float] = None,
        height: Optional[float] = None,
        mode: Optional[ViewMode] = None,
    ) -> Scene:
        layout, view_mode = await self.layout_for(user, width, height, mode)
        return build_scene(layout, view_mode)

    async def open_session(
        self,
        user: CurrentUser,
        width: Optional[float] = None,
        height: Optional[float] = None,
    ) -> NetworkSession:
        graph, view_mode = await self.graph_for(user)
        layout = self._layout(user, graph, width, height)
        return NetworkSession(
            layout, view_mode, graph=graph,
            frame_interval=settings.FRAME_INTERVAL_SECONDS
        )


network_service = NetworkService()


def get_network_service() -> NetworkService:
    return network_service
