from __future__ import annotations

from boidlab.sim.systems.trails import TrailBuffer


def test_trails_evict_oldest_entries(make_agent):
    trails = TrailBuffer(capacity=3)
    agent = make_agent(7)
    for step in range(5):
        agent.position.update(float(step), 0.0)
        trails.push([agent])

    assert trails.get(7) == [(2.0, 0.0), (3.0, 0.0), (4.0, 0.0)]
    assert trails.get(99) == []


def test_trails_export_and_clear(make_agent):
    trails = TrailBuffer(capacity=2)
    trails.push([make_agent(0, x=1.0), make_agent(1, y=2.0)])

    assert trails.export() == {0: [(1.0, 0.0)], 1: [(0.0, 2.0)]}
    trails.clear()
    assert trails.export() == {}
