"""PlantUML diagrams from NgRx effect definitions."""

__version__ = "0.1.0"
