"""
Member and group models.

Members are joined to expenses and settlements by id. The display name is
carried along for output only, so two members may share a name.
"""
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from settlr.models.base import LedgerModel


class Member(BaseModel):
    id: str
    name: str

    model_config = ConfigDict(frozen=True, from_attributes=True)


class Group(LedgerModel):
    name: str = ""
    members: List[Member] = Field(default_factory=list)

    @field_validator("members")
    @classmethod
    def _unique_member_ids(cls, members: List[Member]) -> List[Member]:
        seen = set()
        for member in members:
            if member.id in seen:
                raise ValueError(f"Duplicate member id: {member.id}")
            seen.add(member.id)
        return members

    def member_map(self) -> Dict[str, Member]:
        """Members keyed by id, in group order."""
        return {member.id: member for member in self.members}
