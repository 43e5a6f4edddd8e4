"""reelcal - Letterboxd watch history reconciliation and calendar projection."""

__version__ = "0.1.0"
