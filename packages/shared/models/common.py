import time
import uuid

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def new_id() -> str:
    return uuid.uuid4().hex


def now_ms() -> int:
    """Current time as epoch milliseconds (the createdAt unit)."""
    return int(time.time() * 1000)


class CamelModel(BaseModel):
    """Base for persisted records: snake_case attributes, camelCase wire names."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def alias_map(cls) -> dict[str, str]:
        """Map both attribute and wire names to the wire name."""
        mapping: dict[str, str] = {}
        for name, field in cls.model_fields.items():
            alias = field.alias or name
            mapping[name] = alias
            mapping[alias] = alias
        return mapping


class ArtifactRef(BaseModel):
    uri: str
    sha256: str
    bytes: int
