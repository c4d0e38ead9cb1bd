from __future__ import annotations

import math

from pygame.math import Vector2
from pytest import approx

from boidlab.sim.core.spatial_grid import find_neighbors
from boidlab.sim.systems import steering


def _link(agent, *others):
    find_neighbors(agent, [agent, *others], math.inf, agent.neighbors)


def test_rules_return_zero_without_neighbors(make_agent):
    agent = make_agent(0, vx=1.0)
    assert steering.separation(agent, 1.0) == Vector2()
    assert steering.alignment(agent, 1.0, 4.0, 0.1) == Vector2()
    assert steering.cohesion(agent, 1.0, 4.0, 0.1) == Vector2()


def test_separation_single_neighbor_is_distance_independent(make_agent):
    magnitudes = []
    for distance in (0.5, 10.0, 49.0):
        agent = make_agent(0)
        east = make_agent(1, x=distance)
        _link(agent, east)
        force = steering.separation(agent, 1.0)
        assert force.x < 0.0
        assert force.y == approx(0.0)
        magnitudes.append(force.length())
    assert magnitudes == [approx(1.0)] * 3


def test_separation_pair_is_equal_and_opposite(make_agent):
    a = make_agent(0, x=0.0, y=0.0)
    b = make_agent(1, x=10.0, y=0.0)
    _link(a, b)
    _link(b, a)

    force_a = steering.separation(a, 1.0)
    force_b = steering.separation(b, 1.0)

    assert (force_a.x, force_a.y) == (approx(-1.0), approx(0.0))
    assert (force_b.x, force_b.y) == (approx(1.0), approx(0.0))
    assert force_a.length() == approx(force_b.length())


def test_separation_ignores_coincident_neighbor_but_counts_it(make_agent):
    agent = make_agent(0)
    twin = make_agent(1)
    east = make_agent(2, x=4.0)
    _link(agent, twin, east)

    force = steering.separation(agent, 2.0)

    assert all(math.isfinite(v) for v in force)
    assert (force.x, force.y) == (approx(-1.0), approx(0.0))


def test_alignment_steers_towards_neighbor_heading(make_agent):
    agent = make_agent(0)
    other = make_agent(1, x=5.0, vy=2.0)
    _link(agent, other)

    force = steering.alignment(agent, 1.5, 4.0, 0.1)

    assert force.x == approx(0.0)
    assert force.y == approx(0.15)


def test_alignment_with_stationary_neighbors_only_brakes(make_agent):
    agent = make_agent(0, vx=0.05)
    other = make_agent(1, x=5.0)
    _link(agent, other)

    force = steering.alignment(agent, 1.0, 4.0, 0.1)

    assert (force.x, force.y) == (approx(-0.05), approx(0.0))


def test_cohesion_pulls_towards_centre_of_mass(make_agent):
    agent = make_agent(0)
    _link(agent, make_agent(1, x=10.0, y=10.0), make_agent(2, x=10.0, y=-10.0))

    force = steering.cohesion(agent, 1.0, 4.0, 0.1)

    assert force.x == approx(0.1)
    assert force.y == approx(0.0)


def test_cohesion_at_centre_of_mass_has_no_direction(make_agent):
    agent = make_agent(0, vx=0.02)
    _link(agent, make_agent(1, x=-3.0), make_agent(2, x=3.0))

    force = steering.cohesion(agent, 1.0, 4.0, 0.1)

    assert (force.x, force.y) == (approx(-0.02), approx(0.0))
