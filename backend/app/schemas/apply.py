from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UploadedFile(_CamelModel):
    file_url: str
    original_filename: str


class ApplyEventDetail(_CamelModel):
    tenant: str
    language: str
    name: str
    email: str
    phone: str
    files: List[UploadedFile] = Field(default_factory=list)
    consent_current: bool = False
    consent_future: bool = False
    source_url: str = ""
    referrer: str = ""
    landing_url: str = ""
    url_params: Dict[str, str] = Field(default_factory=dict)
    source_job_id: str = ""


class RunRelayIn(ApplyEventDetail):
    cv_key: str


class ApplyRunOut(_CamelModel):
    success: bool = True
    reference_id: str


class ApplyErrorOut(BaseModel):
    error: str
