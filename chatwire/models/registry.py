"""
Pydantic models for the function registry.
"""

from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from chatwire.models.chat import ChatFunction


class RegistryItem(BaseModel):
    """
    A registered function with its concrete types erased.

    `decode` turns raw JSON argument text into the function's input type and
    `callback` consumes that value, so the registry never needs to know
    either type.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    definition: ChatFunction
    decode: Callable[[str], Any]
    callback: Callable[[Any], Any]


class FunctionRegistry(BaseModel):
    """
    Registry of functions advertised to the model, keyed by name.

    Not synchronized: register up front, then dispatch.
    """

    registry: Dict[str, RegistryItem] = Field(default_factory=dict)

    def get_item(self, name: str) -> Optional[RegistryItem]:
        """Get a registry item by name."""
        return self.registry.get(name)

    def get_definition(self, name: str) -> Optional[ChatFunction]:
        """Get a function definition by name."""
        registry_item = self.registry.get(name)
        return registry_item.definition if registry_item else None

    def get_all_definitions(self) -> List[ChatFunction]:
        """Get all function definitions in registration order."""
        return [item.definition for item in self.registry.values()]
