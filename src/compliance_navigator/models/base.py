"""Shared pydantic base for models that mirror the decision tree document.

The document (and saved progress) use camelCase keys such as ``helpText``
and ``questionId``.  Models accept both camelCase and snake_case on input and
dump camelCase when ``by_alias=True``.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model with camelCase aliases and snake_case population."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
