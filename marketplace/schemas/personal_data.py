from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class PersonalDataShare(BaseModel):
    bill_first_name: Optional[str] = Field(None, max_length=200)
    bill_last_name: Optional[str] = Field(None, max_length=200)
    bill_company: Optional[str] = Field(None, max_length=300)
    bill_street: Optional[str] = Field(None, max_length=300)
    bill_house_number: Optional[str] = Field(None, max_length=20)
    bill_postal_code: Optional[str] = Field(None, max_length=20)
    bill_city: Optional[str] = Field(None, max_length=200)
    bill_phone: Optional[str] = Field(None, max_length=50)
    bill_email: Optional[str] = Field(None, max_length=320)

    exec_same_as_billing: bool = False
    exec_street: Optional[str] = Field(None, max_length=300)
    exec_house_number: Optional[str] = Field(None, max_length=20)
    exec_postal_code: Optional[str] = Field(None, max_length=20)
    exec_city: Optional[str] = Field(None, max_length=200)


class PersonalDataResponse(PersonalDataShare):
    id: str
    request_id: str
    user_id: str
    updated_at: datetime

    model_config = {"from_attributes": True}
