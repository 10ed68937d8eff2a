from typing import Optional

from pydantic import BaseModel


class FolderSelectionIn(BaseModel):
    clients: Optional[str] = None
    therapists: Optional[str] = None
    supervisors: Optional[str] = None


class FolderOut(BaseModel):
    id: str
    name: str


class CacheStatus(BaseModel):
    entries: int
