"""chessbattler - a 5×5 chess puzzle battler.

Spend a point budget on pieces during a timed preparation phase, then
play them against a pre-placed opponent.
"""

__version__ = "0.1.0"
