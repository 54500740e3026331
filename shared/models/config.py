from typing import Literal

from pydantic import BaseModel

ValueType = Literal["string", "number", "bool", "list"]


class EnvConfig(BaseModel):
    """One engine setting, read as "<TYPE>_<ENGINE>_<env_key>". A None default makes it mandatory."""

    env_key: str
    val_type: ValueType = "string"
    default: str | int | float | bool | list | None = None
