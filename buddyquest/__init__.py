"""
BuddyQuest learning engine.

Adaptive question selection, interactive challenge rounds, a persistent
per-learner question bank and the quest objective tracker that sit behind
the BuddyQuest children's game.
"""

__version__ = "0.1.0"
