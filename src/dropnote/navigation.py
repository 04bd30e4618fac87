"""Route stack owned by the app controller."""

from __future__ import annotations

from dropnote.models import Route, RouteKind


class Navigator:
    """Stack of routes; the last one is the screen in focus."""

    def __init__(self, root: Route) -> None:
        self._routes: list[Route] = [root]

    def __len__(self) -> int:
        return len(self._routes)

    @property
    def routes(self) -> tuple[Route, ...]:
        return tuple(self._routes)

    @property
    def current(self) -> Route:
        return self._routes[-1]

    @property
    def editing(self) -> bool:
        return self.current.kind is RouteKind.NOTE_EDIT

    def push(self, route: Route) -> Route:
        self._routes.append(route)
        return route

    def pop(self) -> Route | None:
        """Drop the current route; the root route is never popped."""
        if len(self._routes) == 1:
            return None
        return self._routes.pop()

    def replace_current(self, route: Route) -> None:
        self._routes[-1] = route
