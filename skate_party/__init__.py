"""
Skate Party
===========

Headless simulation core for Ice Cream Skate Party, an arcade catch game:
steer the skater under falling scoops, build combos, grab power-ups and
keep your lives.

- catch_core: the per-frame simulation, its Gymnasium wrapper and replays
- evaluation: seed-bank evaluation harness for agents

All tunable parameters are in game_config.yaml (extended rules) and
classic_config.yaml (the reduced five-life rules).
"""
