"""Domain Layer: models, events and interfaces shared by every other layer."""
