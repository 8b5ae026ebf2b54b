"""Base schema for payloads that cross the command/event boundary."""

from typing import Any, Dict

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Model serialized with camelCase keys, accepting either spelling on input."""

    model_config = {"alias_generator": to_camel, "populate_by_name": True}

    def to_wire(self) -> Dict[str, Any]:
        """Dump to a JSON-compatible dict using wire (camelCase) names."""
        return self.model_dump(by_alias=True, mode="json")
