from datetime import date
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, Literal


class _Body(BaseModel):
    # accept both snake_case and the camelCase names the web client sends
    model_config = ConfigDict(populate_by_name=True)


def _blank_to_none(v):
    if isinstance(v, str) and not v.strip():
        return None
    return v


# ── Auth ──

class RegisterRequest(_Body):
    email: str
    password: str
    name: str

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        v = v.strip().lower()
        if "@" not in v:
            raise ValueError("email must be a valid address")
        return v

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v.strip():
            raise ValueError("name is required")
        return v.strip()


class LoginRequest(_Body):
    email: str
    password: str


class UserOut(BaseModel):
    id: str
    email: str
    name: str
    created_at: str


class SessionOut(BaseModel):
    user: Optional[UserOut] = None


# ── Members ──

class MemberCreate(_Body):
    first_name: str = Field(alias="firstName")
    last_name: str = Field(alias="lastName")
    birth_date: Optional[date] = Field(None, alias="birthDate")
    death_date: Optional[date] = Field(None, alias="deathDate")
    photo_url: Optional[str] = Field(None, alias="photoUrl")
    bio: Optional[str] = None

    @field_validator("first_name", "last_name")
    @classmethod
    def validate_name(cls, v, info):
        if not v.strip():
            raise ValueError(f"{info.field_name} is required")
        return v.strip()

    @field_validator("birth_date", "death_date", mode="before")
    @classmethod
    def blank_date(cls, v):
        return _blank_to_none(v)


class MemberUpdate(_Body):
    """Partial update: only fields present in the request body are applied."""
    first_name: Optional[str] = Field(None, alias="firstName")
    last_name: Optional[str] = Field(None, alias="lastName")
    birth_date: Optional[date] = Field(None, alias="birthDate")
    death_date: Optional[date] = Field(None, alias="deathDate")
    photo_url: Optional[str] = Field(None, alias="photoUrl")
    bio: Optional[str] = None

    @field_validator("first_name", "last_name")
    @classmethod
    def validate_name(cls, v, info):
        if v is not None and not v.strip():
            raise ValueError(f"{info.field_name} cannot be empty")
        return v

    @field_validator("birth_date", "death_date", mode="before")
    @classmethod
    def blank_date(cls, v):
        return _blank_to_none(v)

    def changes(self) -> dict:
        out = {}
        for field in self.model_fields_set:
            value = getattr(self, field)
            out[field] = value.isoformat() if isinstance(value, date) else value
        return out


class MemberOut(BaseModel):
    id: str
    first_name: str
    last_name: str
    birth_date: Optional[str] = None
    death_date: Optional[str] = None
    photo_url: Optional[str] = None
    bio: Optional[str] = None
    created_at: str


# ── Relationships ──

class RelCreate(_Body):
    member_id: str = Field(alias="memberId")
    related_member_id: str = Field(alias="relatedMemberId")
    type: Literal["PARENT_CHILD", "SPOUSE"]

    @field_validator("member_id")
    @classmethod
    def validate_member_id(cls, v):
        if not v:
            raise ValueError("memberId is required")
        return v

    @field_validator("related_member_id")
    @classmethod
    def validate_related_member_id(cls, v, info):
        if not v:
            raise ValueError("relatedMemberId is required")
        if v == info.data.get("member_id"):
            raise ValueError("a member cannot be related to themselves")
        return v


class RelationshipOut(BaseModel):
    id: str
    member_id: str
    related_member_id: str
    type: str
    created_at: str


class TreeOut(BaseModel):
    members: list[MemberOut]
    relationships: list[RelationshipOut]


class UploadOut(BaseModel):
    url: str


# ── Layout ──

class PositionOut(BaseModel):
    x: float
    y: float


class EdgeOut(BaseModel):
    id: str
    source: str
    target: str
    kind: Literal["hierarchy", "partnership"]
    edge_type: str
    label: Optional[str] = None


class LayoutOut(BaseModel):
    positions: dict[str, PositionOut]
    generations: dict[str, int]
    edges: list[EdgeOut]
