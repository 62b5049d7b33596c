"""
skillforge - Skill cost tracking and optimization.

Profile skills, rank the wasteful ones, rewrite them, and promote a rewrite
only after it passes an A/B check.
"""

from skillforge.forge import Forge, ForgeReport
from skillforge.ledger import Ledger

__version__ = "0.1.0"
__all__ = ["Forge", "ForgeReport", "Ledger", "__version__"]
