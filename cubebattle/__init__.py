from .config import GameConfig, GameSetup, PlayerSetup
from .sim.engine import GameEngine

__all__ = ["GameConfig", "GameEngine", "GameSetup", "PlayerSetup"]
