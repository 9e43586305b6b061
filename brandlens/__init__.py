"""brandlens: derive confidence-scored brand rules from design assets."""

__version__ = "0.1.0"
