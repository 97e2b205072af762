from pydantic import BaseModel, EmailStr, Field, model_validator
from typing import List, Optional
from datetime import date, datetime
from enum import Enum


class RegistrationStage(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    BASIC_INCOMPLETE = "basic_incomplete"
    BASIC_COMPLETE = "basic_complete"
    SELLER_INCOMPLETE = "seller_incomplete"
    SELLER_COMPLETE = "seller_complete"


class _FormModel(BaseModel):
    # browsers submit empty inputs as ""
    @model_validator(mode="before")
    @classmethod
    def blank_to_none(cls, data):
        if isinstance(data, dict):
            return {
                k: (None if isinstance(v, str) and not v.strip() else v)
                for k, v in data.items()
            }
        return data


# ======================
# Local credentials
# ======================

class LocalRegisterForm(_FormModel):
    username: str = Field(..., min_length=3, max_length=64)
    password: str = Field(..., min_length=8)
    email: Optional[EmailStr] = None


class LocalLoginForm(_FormModel):
    username: str
    password: str


# ======================
# Onboarding stages
# ======================

class BasicProfileForm(_FormModel):
    first_name: str = Field(..., min_length=1)
    last_name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone_number: Optional[str] = None
    address: Optional[str] = None
    zipcode: Optional[str] = None
    date_of_birth: Optional[date] = None
    is_seller: bool = False


class SellerProfileForm(_FormModel):
    organisation_name: str = Field(..., min_length=1)
    address: Optional[str] = None
    zipcode: Optional[str] = None
    phone_number: Optional[str] = None
    website: Optional[str] = None
    email: Optional[EmailStr] = None
    facebook: Optional[str] = None
    twitter: Optional[str] = None
    instagram: Optional[str] = None
    linked_in: Optional[str] = None
    employment_history: List[str] = []
    business_type: Optional[str] = None


# ======================
# Stored record
# ======================

class Profile(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone_number: Optional[str] = None
    address: Optional[str] = None
    zipcode: Optional[str] = None
    date_of_birth: Optional[datetime] = None


class SocialHandles(BaseModel):
    facebook: Optional[str] = None
    twitter: Optional[str] = None
    instagram: Optional[str] = None
    linked_in: Optional[str] = None


class Employment(BaseModel):
    company_name: str


class SellerProfile(BaseModel):
    organisation_name: str
    address: Optional[str] = None
    zipcode: Optional[str] = None
    phone_number: Optional[str] = None
    website: Optional[str] = None
    email: Optional[EmailStr] = None
    social_handles: SocialHandles = SocialHandles()
    employment_history: List[Employment] = []
    business_type: Optional[str] = None
    submitted_at: Optional[datetime] = None


class UserInDB(BaseModel):
    schema_version: int
    email: Optional[EmailStr] = None
    username: Optional[str] = None
    federated_id: Optional[str] = None
    password_hash: Optional[str] = None

    profile: Profile = Profile()

    # unset until the basic profile stage chooses
    is_seller: Optional[bool] = None
    seller_profile: Optional[SellerProfile] = None

    registration_stage: RegistrationStage

    created_at: datetime
    updated_at: Optional[datetime] = None
    last_active_at: Optional[datetime] = None
