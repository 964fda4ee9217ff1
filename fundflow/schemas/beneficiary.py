from typing import Optional

from pydantic import BaseModel, Field


class AddBeneficiaryRequest(BaseModel):
    """
    Beneficiary to add.

    accountIdentifier is the recipient's registered email; name is what the
    client typed and is only informational.
    """
    accountIdentifier: str = Field(..., min_length=1, max_length=100)
    name: Optional[str] = None


class BeneficiaryResponse(BaseModel):
    beneficiaryId: int
    name: str
    accountIdentifier: str


class BeneficiaryCreatedResponse(BeneficiaryResponse):
    message: str = "Beneficiary added successfully!"
