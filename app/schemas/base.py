from typing import List
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """ Snake-case attributes, camelCase JSON on the wire """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


def normalize_list(values) -> List[str]:
    """ Accepts ["a", "b"] or ["a, b"] (a single comma separated form value) """
    items = []
    for value in values or []:
        items.extend(part.strip() for part in str(value).split(","))
    return [item for item in items if item]
