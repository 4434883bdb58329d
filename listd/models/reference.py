"""Reference list data models"""

from pydantic import BaseModel, ConfigDict
from typing import Optional


class City(BaseModel):
    """City with its region"""
    id: int
    name: str
    region: Optional[str] = None


class CatalogTerm(BaseModel):
    """Row of a slugged lookup table (property type, listing type, status)"""
    model_config = ConfigDict(extra="allow")

    id: int
    name: str
    slug: Optional[str] = None
