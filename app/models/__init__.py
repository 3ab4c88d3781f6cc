"""Models module - imports all models for SQLModel registration."""

# Import all models so SQLModel can register them
from app.models.user import User
from app.models.persona import Persona, PersonaImage
from app.models.generation import Generation

__all__ = [
    "User",
    "Persona",
    "PersonaImage",
    "Generation",
]
