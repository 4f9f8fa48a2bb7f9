from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import declarative_base
from datetime import datetime
from pydantic import AliasChoices, BaseModel, Field
from typing import Optional, Union
from enum import Enum

Base = declarative_base()

# parent_id value for top-level files
ROOT_PARENT_ID = 0

# Largest value an INTEGER column can hold (signed 64-bit)
MAX_ROW_ID = 2**63 - 1


class FileType(str, Enum):
    FOLDER = "folder"
    FILE = "file"
    IMAGE = "image"


# SQLAlchemy Models
class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)


class UserSession(Base):
    __tablename__ = "sessions"

    token = Column(String, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    expires_at = Column(DateTime, nullable=False)


class File(Base):
    __tablename__ = "files"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    name = Column(String, nullable=False)
    type = Column(String, nullable=False)  # folder, file, image
    # Root sentinel (0) or the id of a folder; no FK so the sentinel can be stored literally
    parent_id = Column(Integer, default=ROOT_PARENT_ID, index=True, nullable=False)
    is_public = Column(Boolean, default=False, nullable=False)
    local_path = Column(String, nullable=True)  # Blob location, never set for folders
    created_at = Column(DateTime, default=datetime.utcnow)


# Pydantic Models for API
class FileUploadRequest(BaseModel):
    # Everything optional: missing fields are reported by FileValidator, not as 422s
    name: Optional[str] = None
    type: Optional[str] = None
    parent_id: Optional[Union[int, str]] = Field(default=ROOT_PARENT_ID, alias="parentId")
    is_public: bool = Field(default=False, alias="isPublic")
    data: Optional[str] = None

    class Config:
        populate_by_name = True


class FileRecordResponse(BaseModel):
    id: int
    user_id: int = Field(validation_alias=AliasChoices("user_id", "userId"), serialization_alias="userId")
    name: str
    type: str
    is_public: bool = Field(validation_alias=AliasChoices("is_public", "isPublic"), serialization_alias="isPublic")
    parent_id: int = Field(validation_alias=AliasChoices("parent_id", "parentId"), serialization_alias="parentId")

    class Config:
        from_attributes = True


class UserCreateRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class UserResponse(BaseModel):
    id: int
    email: str

    class Config:
        from_attributes = True


class TokenResponse(BaseModel):
    token: str
