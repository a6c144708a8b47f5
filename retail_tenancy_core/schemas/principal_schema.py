"""
Schema for the authenticated principal.

Authentication happens outside this package; the host application hands
the resolver a callable returning a ``Principal`` (or None for anonymous
requests).
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Principal(BaseModel):
    """The authenticated actor a request runs on behalf of."""

    id: int
    name: str = Field(default="", max_length=200)
    email: Optional[str] = Field(default=None, max_length=200)
    # Super administrators may have no home tenant
    tenant_id: Optional[int] = None
    roles: List[str] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True, extra="ignore", frozen=True)

    def has_role(self, role: str) -> bool:
        return role in self.roles
