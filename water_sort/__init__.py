"""
Water Sort Package
==================

Engine, Gymnasium environment and evaluation harness for the water sort
puzzle: tubes of stacked liquid segments are sorted by pouring the top run
of one tube onto a matching or empty tube until every tube holds a single
color.

All tunable parameters live in game_config.yaml.
"""
