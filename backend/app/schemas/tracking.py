from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class TrackingData(BaseModel):
    params: Dict[str, str] = Field(default_factory=dict)
    landing_url: str = ""
    referer: str = ""
    captured_at: int = 0
    redirect_count: int = 0
    chain: List[str] = Field(default_factory=list)

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
