"""
PoliHub REST adapters (infra).

- PoliHubClient: content source for the learning engine (modules, lessons, quizzes)
- RewardClient: XP reward hook
"""

from infra.polihub.client import PoliHubClient, RewardClient

__all__ = ["PoliHubClient", "RewardClient"]
