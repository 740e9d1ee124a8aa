"""rigsweep: reclaim done polecats and close completed convoys across a town's rigs."""

__version__ = "0.1.0"
