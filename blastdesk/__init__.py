"""BlastDesk - email blast and e-card backend"""

__version__ = "1.0.0"
