"""BadgeForge: bulk ID card layout and import service"""

__version__ = "1.0.0"
