from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire and in stored documents."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DocumentModel(CamelModel):
    """A model persisted as one document; ``id`` is the store-assigned key."""

    id: str = ""

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(
            mode="json", by_alias=True, exclude={"id"}, exclude_none=True
        )

    @classmethod
    def from_document(cls, doc_id: str, data: dict[str, Any]):
        return cls.model_validate({**data, "id": doc_id})
