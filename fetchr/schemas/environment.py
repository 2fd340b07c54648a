"""
Pydantic schemas for environments.

Variables travel as serialized JSON text; ``EnvironmentRecord.parsed_variables``
reads them back, keeping order and duplicates.
"""

import logging
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .serialized import dump_json, parse_json_list

logger = logging.getLogger(__name__)


class EnvironmentVariable(BaseModel):
    """A single {key, value} pair."""
    key: str
    value: str = ""


class EnvironmentRecord(BaseModel):
    """Schema for a persisted environment."""
    id: str
    name: str
    variables: str = "[]"
    is_active: bool = False
    created_at: datetime = Field(default_factory=datetime.utcnow)

    model_config = ConfigDict(from_attributes=True)

    def parsed_variables(self) -> list[EnvironmentVariable]:
        """Variables in stored order; malformed entries are dropped."""
        result = []
        for item in parse_json_list(self.variables):
            try:
                result.append(EnvironmentVariable.model_validate(item))
            except ValidationError:
                logger.debug("Skipping malformed variable in environment %s: %r", self.id, item)
        return result


def serialize_variables(variables: list[EnvironmentVariable]) -> str:
    return dump_json([v.model_dump() for v in variables])
