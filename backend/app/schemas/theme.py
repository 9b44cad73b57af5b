from typing import Optional

from pydantic import BaseModel


class Theme(BaseModel):
    logo_url: Optional[str] = None
    brand_name: Optional[str] = "SmartyTalent"
    primary_color: str = "#2563eb"
    secondary_color: str = "#1e40af"
    background_color: str = "#f8fafc"
    button_radius: str = "0.5rem"


DEFAULT_THEME = Theme()
