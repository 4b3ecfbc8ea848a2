"""
Persona Models

A persona is a simulated user: its own fixtures, its own overrides.
Nothing saved under one persona is ever visible under another.
"""

from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class Persona(BaseModel):
    """A named, isolated data namespace."""
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: str = Field(
        ...,
        min_length=1,
        max_length=64,
        description="Namespace key, used in storage keys"
    )
    name: str = Field(
        ...,
        min_length=1,
        description="Fixture name (persona_<name>.json)"
    )
    display_name: str

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        """Ids end up in file paths, so keep them to a safe alphabet."""
        if not v.replace("-", "").replace("_", "").isalnum():
            raise ValueError(f"Persona id must be alphanumeric (with - or _): {v!r}")
        return v


JOHN = Persona(id="john", name="john", display_name="John")
BILL = Persona(id="bill", name="bill", display_name="Bill")
KIM = Persona(id="kim", name="kim", display_name="Kim")

DEFAULT_PERSONAS = (JOHN, BILL, KIM)


class PersonaRegistry:
    """
    The personas the app can switch between.

    The first persona is the default unless ``default_id`` says otherwise.
    """

    def __init__(
        self,
        personas: Iterable[Persona] = DEFAULT_PERSONAS,
        default_id: Optional[str] = None,
    ):
        self._personas = {persona.id: persona for persona in personas}
        if not self._personas:
            raise ValueError("A persona registry needs at least one persona")

        if default_id is not None and default_id not in self._personas:
            raise ValueError(f"Unknown default persona: {default_id}")
        self._default_id = default_id or next(iter(self._personas))

    @property
    def default(self) -> Persona:
        return self._personas[self._default_id]

    def get(self, persona_id: str) -> Optional[Persona]:
        """Look up a persona by id; None if unknown."""
        return self._personas.get(persona_id)

    def all(self) -> list[Persona]:
        return list(self._personas.values())

    def __contains__(self, persona_id: object) -> bool:
        return persona_id in self._personas

    def __len__(self) -> int:
        return len(self._personas)
