"""
Base commune des schémas Pydantic : noms snake_case en Python,
camelCase sur le fil (classId, teacherId, ...).
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class ErrorResponse(CamelModel):
    """Corps renvoyé pour tout échec métier."""
    success: bool = False
    error: str
    kind: str
    available_dates: Optional[List[str]] = None
