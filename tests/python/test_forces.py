from __future__ import annotations

from pygame.math import Vector2
from pytest import approx

from boidlab.sim.systems.forces import obstacle_avoidance, pointer_force
from boidlab.sim.types.world_state import Obstacle, PointerMode, PointerState


def _obstacle(x: float, y: float, radius: float) -> Obstacle:
    return Obstacle(position=Vector2(x, y), radius=radius)


def test_obstacle_pushes_agent_away_along_plus_y(make_agent):
    obstacle = _obstacle(100.0, 100.0, 30.0)
    agent = make_agent(0, x=100.0, y=150.0)

    force = obstacle_avoidance(agent, [obstacle], buffer=40.0, strength=0.6)

    assert force.x == approx(0.0)
    assert force.y > 0.0
    assert force.y == approx(0.6 * (1.0 - 50.0 / 70.0))


def test_obstacle_force_falls_off_linearly_to_zero_at_buffer_edge(make_agent):
    obstacle = _obstacle(100.0, 100.0, 30.0)
    magnitudes = []
    for distance in (35.0, 50.0, 65.0, 69.999, 70.0, 90.0):
        agent = make_agent(0, x=100.0, y=100.0 + distance)
        magnitudes.append(obstacle_avoidance(agent, [obstacle], 40.0, 1.0).length())

    assert magnitudes[0] > magnitudes[1] > magnitudes[2] > magnitudes[3] > 0.0
    assert magnitudes[3] == approx(0.0, abs=1e-4)
    assert magnitudes[4] == 0.0
    assert magnitudes[5] == 0.0
    assert magnitudes[1] - magnitudes[2] == approx(magnitudes[0] - magnitudes[1])


def test_obstacle_at_agent_position_is_skipped(make_agent):
    agent = make_agent(0, x=10.0, y=10.0)
    force = obstacle_avoidance(agent, [_obstacle(10.0, 10.0, 5.0)], 40.0, 1.0)
    assert force == Vector2()


def test_obstacle_contributions_sum(make_agent):
    agent = make_agent(0)
    left = _obstacle(-20.0, 0.0, 10.0)
    below = _obstacle(0.0, -20.0, 10.0)

    combined = obstacle_avoidance(agent, [left, below], 20.0, 1.0)
    only_left = obstacle_avoidance(agent, [left], 20.0, 1.0)
    only_below = obstacle_avoidance(agent, [below], 20.0, 1.0)

    assert combined.x == approx(only_left.x + only_below.x)
    assert combined.y == approx(only_left.y + only_below.y)
    assert combined.x > 0.0 and combined.y > 0.0


def _pointer(mode: PointerMode, on_world: bool = True) -> PointerState:
    return PointerState(position=Vector2(100.0, 0.0), on_world=on_world, mode=mode, radius=150.0, strength=0.4)


def test_pointer_attract_and_repel(make_agent):
    agent = make_agent(0, x=25.0)

    pull = pointer_force(agent, _pointer(PointerMode.ATTRACT))
    push = pointer_force(agent, _pointer(PointerMode.REPEL))

    assert pull.x == approx(0.4 * (1.0 - 75.0 / 150.0))
    assert pull.y == approx(0.0)
    assert push.x == approx(-pull.x)


def test_pointer_inactive_cases(make_agent):
    agent = make_agent(0, x=25.0)
    assert pointer_force(agent, _pointer(PointerMode.OFF)) == Vector2()
    assert pointer_force(agent, _pointer(PointerMode.ATTRACT, on_world=False)) == Vector2()

    far = make_agent(1, x=-60.0)
    assert pointer_force(far, _pointer(PointerMode.ATTRACT)) == Vector2()

    on_top = make_agent(2, x=100.0)
    assert pointer_force(on_top, _pointer(PointerMode.REPEL)) == Vector2()
