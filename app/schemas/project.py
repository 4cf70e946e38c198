from pydantic import BaseModel, Field, field_validator
from typing import List, Optional


class ProjectCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    emoji: Optional[str] = None
    currency: Optional[str] = None
    members: List[str] = Field(min_length=1)

    @field_validator("members")
    @classmethod
    def strip_member_names(cls, v: List[str]) -> List[str]:
        names = [name.strip() for name in v]
        if not all(names):
            raise ValueError("Member names cannot be blank")
        return names


class ProjectUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    emoji: Optional[str] = None
    currency: Optional[str] = None


class ProjectOut(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    emoji: Optional[str] = None
    currency: str

    class Config:
        from_attributes = True


class MemberCreate(BaseModel):
    name: str

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Member name is required")
        return v


class MemberOut(BaseModel):
    id: str
    project_id: str
    name: str

    class Config:
        from_attributes = True


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1)
    color: Optional[str] = None


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    color: Optional[str] = None


class CategoryOut(BaseModel):
    id: str
    project_id: str
    name: str
    color: str

    class Config:
        from_attributes = True


class PaymentMethodCreate(BaseModel):
    name: str = Field(min_length=1)
    icon: Optional[str] = None


class PaymentMethodOut(BaseModel):
    id: str
    project_id: str
    name: str
    icon: str

    class Config:
        from_attributes = True


class ProjectDetail(ProjectOut):
    members: List[MemberOut]
    categories: List[CategoryOut]
    payment_methods: List[PaymentMethodOut]
