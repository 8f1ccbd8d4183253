"""
Base commune des schémas exposés aux clients (app mobile / desktop enseignant).
Les clients existants attendent du camelCase (studentId, offlineId...) ;
côté Python les champs restent en snake_case.
"""

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = {"alias_generator": to_camel, "populate_by_name": True}
