from typing import Generic, TypeVar, Optional
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Serializes as camelCase, accepts both camelCase and snake_case input."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Meta(CamelModel):
    page: Optional[int] = None
    page_size: Optional[int] = None
    total: Optional[int] = None

class ApiResponse(CamelModel, Generic[T]):
    success: bool
    data: Optional[T]
    meta: Optional[Meta] = None
    message: Optional[str] = None
    errors: Optional[list] = None
    trace_id: Optional[str] = None
