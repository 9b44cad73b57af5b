from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class JobData(BaseModel):
    name: Dict[str, str]
    language: Optional[str] = None
    locations: Optional[List[Dict[str, Any]]] = None

    model_config = ConfigDict(extra="allow")
