"""
Simulation driver.

Simulation owns the body store and runs the per-step pipeline:

    build_tree -> compute_accelerations -> integrate

It provides shared infrastructure for callers such as renderers or UI
panels:
- Event system (start/tick/end events)
- Body store management via properties, including reset
- Parameter changes that take effect from the next step
- Optional culling of bodies that escape past cull_distance
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Callable, Optional, Sequence

if TYPE_CHECKING:
    from typing_extensions import Self

from .parameters import SimulationParameters
from .physics.force import compute_accelerations
from .physics.integrator import integrate
from .spatial.quadtree import QuadTree, build_tree
from .types import Body, BodyLike, Event, EventType
from .validation import InvalidParameterError, validate_steps


class Simulation:
    """
    Barnes-Hut N-body simulation.

    Each step builds a fresh quadtree from the current bodies, evaluates the
    softened acceleration on every body and advances them with symplectic
    Euler. Parameters are snapshotted at the start of a step, so assigning
    ``parameters`` mid-run affects the following step only.

    Example:
        sim = Simulation(
            bodies=[{"x": 0, "y": 0}, {"x": 10, "y": 0}, {"x": 0, "y": 10}],
            parameters=SimulationParameters(g=1.0, epsilon=0.1, dt=0.01),
        )
        sim.run(100)

        for body in sim.bodies:
            print(f"Body {body.index}: ({body.x}, {body.y})")
    """

    def __init__(
        self,
        *,
        bodies: Optional[Sequence[BodyLike]] = None,
        parameters: Optional[SimulationParameters] = None,
        workers: Optional[int] = None,
        strict_bounds: bool = False,
        on_start: Optional[Callable[[Optional[Event]], None]] = None,
        on_tick: Optional[Callable[[Optional[Event]], None]] = None,
        on_end: Optional[Callable[[Optional[Event]], None]] = None,
    ) -> None:
        """
        Initialize simulation.

        Args:
            bodies: Initial bodies (Body objects, dicts, or objects with attributes)
            parameters: Step parameters. Defaults to SimulationParameters().
            workers: Thread pool size for force evaluation (None = serial)
            strict_bounds: If True, a body outside the root bounds raises
                OutOfBoundsError instead of being excluded for the step
            on_start: Callback for start event
            on_tick: Callback for tick event (once per step)
            on_end: Callback for end event
        """
        self._bodies: list[Body] = []
        self._parameters: SimulationParameters = SimulationParameters()
        self._events: dict[EventType, Callable[[Optional[Event]], None]] = {}
        self._tree: Optional[QuadTree] = None
        self._step_count: int = 0
        self._time: float = 0.0
        self._workers: Optional[int] = None
        self._strict_bounds: bool = bool(strict_bounds)

        # Set initial values via properties (triggers normalization)
        if bodies is not None:
            self.bodies = bodies
        if parameters is not None:
            self.parameters = parameters
        self.workers = workers

        # Register event callbacks
        if on_start:
            self._events[EventType.start] = on_start
        if on_tick:
            self._events[EventType.tick] = on_tick
        if on_end:
            self._events[EventType.end] = on_end

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def bodies(self) -> list[Body]:
        """Get the body store."""
        return self._bodies

    @bodies.setter
    def bodies(self, value: Sequence[BodyLike]) -> None:
        """Replace the body store from Body objects, dicts, or objects."""
        store: list[Body] = []
        for body_data in value:
            if isinstance(body_data, Body):
                body = body_data
            elif isinstance(body_data, dict):
                body = Body(**body_data)
            else:
                # Generic object - copy attributes
                kwargs = {
                    attr: getattr(body_data, attr)
                    for attr in ["x", "y", "vx", "vy", "mass", "position", "velocity"]
                    if hasattr(body_data, attr)
                }
                body = Body(**kwargs)
            body.index = len(store)
            store.append(body)
        self._bodies = store

    @property
    def parameters(self) -> SimulationParameters:
        """Get parameters used from the next step on."""
        return self._parameters

    @parameters.setter
    def parameters(self, value: SimulationParameters) -> None:
        """Set parameters; the change applies from the next step."""
        if not isinstance(value, SimulationParameters):
            raise InvalidParameterError(
                f"parameters must be SimulationParameters, got {type(value).__name__}"
            )
        self._parameters = value

    @property
    def workers(self) -> Optional[int]:
        """Get force evaluation thread count (None = serial)."""
        return self._workers

    @workers.setter
    def workers(self, value: Optional[int]) -> None:
        """Set force evaluation thread count."""
        if value is not None and int(value) < 1:
            raise InvalidParameterError(f"workers must be >= 1, got {value}")
        self._workers = int(value) if value is not None else None

    @property
    def tree(self) -> Optional[QuadTree]:
        """
        Tree built during the most recent step (None before the first step).

        Its body indices refer to the store as it was before that step's culling.
        """
        return self._tree

    @property
    def step_count(self) -> int:
        """Number of completed steps since construction or reset."""
        return self._step_count

    @property
    def time(self) -> float:
        """Simulated time elapsed since construction or reset."""
        return self._time

    # -------------------------------------------------------------------------
    # Event System
    # -------------------------------------------------------------------------

    def on(self, event: EventType | str, callback: Callable[[Optional[Event]], None]) -> Self:
        """
        Subscribe to a simulation event.

        Args:
            event: Event type (EventType enum or string name)
            callback: Function to call when event fires

        Returns:
            self (for chaining)
        """
        if isinstance(event, str):
            event = EventType[event]
        self._events[event] = callback
        return self

    def trigger(self, event: Event) -> None:
        """
        Trigger an event, calling the registered callback.

        Args:
            event: Event payload with type and optional data
        """
        event_type = event.get("type")
        if event_type is not None and event_type in self._events:
            self._events[event_type](event)

    # -------------------------------------------------------------------------
    # Lifecycle Methods
    # -------------------------------------------------------------------------

    def step(self) -> Self:
        """
        Advance the simulation by one timestep.

        Fires a tick event whose ``excluded`` field lists bodies that were
        outside the root bounds and received no force this step, and whose
        ``culled`` field lists the pre-step indices of bodies removed for
        passing ``cull_distance``.

        Returns:
            self (for chaining)
        """
        params = self._parameters
        bodies = self._bodies

        bounds = params.root_bounds(bodies)
        tree = build_tree(bodies, bounds, params.max_depth, strict=self._strict_bounds)
        accelerations = compute_accelerations(tree, bodies, params, workers=self._workers)
        dt = params.effective_dt
        integrate(bodies, accelerations, dt)
        culled = self._cull(params)

        self._tree = tree
        self._step_count += 1
        self._time += dt

        excluded = tree.out_of_bounds.indices if tree.out_of_bounds is not None else []
        self.trigger(
            {
                "type": EventType.tick,
                "step": self._step_count,
                "time": self._time,
                "excluded": excluded,
                "culled": culled,
            }
        )
        return self

    def _cull(self, params: SimulationParameters) -> list[int]:
        """
        Remove bodies farther than cull_distance from the world center.

        Surviving bodies are re-indexed in order. Bodies with a non-finite
        position are removed too.

        Returns:
            Indices (before removal) of the removed bodies
        """
        limit = params.cull_distance
        if limit is None:
            return []

        cx, cy = params.world_center
        kept: list[Body] = []
        culled: list[int] = []
        for i, body in enumerate(self._bodies):
            if math.hypot(body.x - cx, body.y - cy) <= limit:
                body.index = len(kept)
                kept.append(body)
            else:
                culled.append(i)

        if culled:
            self._bodies = kept
        return culled

    def run(self, steps: int = 1) -> Self:
        """
        Run several steps, firing start and end events around them.

        Args:
            steps: Number of steps to run

        Returns:
            self (for chaining)
        """
        validate_steps(steps)
        self.trigger({"type": EventType.start, "step": self._step_count, "time": self._time})

        for _ in range(steps):
            self.step()

        self.trigger({"type": EventType.end, "step": self._step_count, "time": self._time})
        return self

    def reset(
        self,
        bodies: Optional[Sequence[BodyLike]] = None,
        parameters: Optional[SimulationParameters] = None,
    ) -> Self:
        """
        Discard the current body store and start over.

        Args:
            bodies: New bodies (empty store if None)
            parameters: New parameters (defaults if None)

        Returns:
            self (for chaining)
        """
        self.bodies = bodies if bodies is not None else []
        self.parameters = parameters if parameters is not None else SimulationParameters()
        self._tree = None
        self._step_count = 0
        self._time = 0.0
        return self


__all__ = ["Simulation"]
