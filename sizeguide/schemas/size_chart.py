from typing import Dict, List, Union
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# {"size": "M", "chest": 104.0, "length": 70.0, ...}
SizeRow = Dict[str, Union[str, float]]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SizeTable(CamelModel):
    headers: List[str] = Field(default_factory=list)
    rows: List[SizeRow] = Field(default_factory=list)
    garment_type: str = "top"


class SizeChart(CamelModel):
    headers: List[str] = Field(default_factory=list)
    rows: List[SizeRow] = Field(default_factory=list)
    tables: List[SizeTable] = Field(default_factory=list)
    raw_text: str = ""
    translated_text: str = ""
