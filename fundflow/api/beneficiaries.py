from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from fundflow.database import get_db
from fundflow.dependencies import get_current_identity
from fundflow.schemas.auth import MessageResponse
from fundflow.schemas.beneficiary import AddBeneficiaryRequest, BeneficiaryCreatedResponse, BeneficiaryResponse
from fundflow.services import beneficiary_service
from fundflow.utils.security import Identity

router = APIRouter(prefix="/beneficiaries", tags=["beneficiaries"])


@router.get("/{owner_id}", response_model=List[BeneficiaryResponse])
def get_beneficiaries(
    owner_id: int,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Beneficiaries of the caller; other users' lists are forbidden"""
    rows = beneficiary_service.list_beneficiaries(db, identity, owner_id)
    return [
        BeneficiaryResponse(beneficiaryId=link.id, name=user.name, accountIdentifier=user.email)
        for link, user in rows
    ]


@router.post("", status_code=status.HTTP_201_CREATED, response_model=BeneficiaryCreatedResponse)
def add_beneficiary(
    request: AddBeneficiaryRequest,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Adds an approved user, found by email, as a beneficiary"""
    link, user = beneficiary_service.add_beneficiary(db, identity, request.accountIdentifier)
    return BeneficiaryCreatedResponse(beneficiaryId=link.id, name=user.name, accountIdentifier=user.email)


@router.delete("/{beneficiary_id}", response_model=MessageResponse)
def remove_beneficiary(
    beneficiary_id: int,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Removes one of the caller's beneficiaries"""
    beneficiary_service.remove_beneficiary(db, identity, beneficiary_id)
    return MessageResponse(message="Beneficiary removed successfully.")
