"""Business-rule failures raised by the services and rendered by the API."""
from fastapi import status


class BankError(Exception):
    """Base class: every failure kind knows its HTTP status and error code"""
    status_code = status.HTTP_400_BAD_REQUEST
    code = "BankError"
    message = "Request could not be processed."

    def __init__(self, message: str = None):
        self.message = message or self.message
        super().__init__(self.message)


# Authentication

class DuplicateIdentity(BankError):
    code = "DuplicateIdentity"
    message = "User already exists with this email."


class InvalidCredentials(BankError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "InvalidCredentials"
    message = "Invalid email or password."


class NotApproved(BankError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "NotApproved"
    message = "Account not approved yet."


class InvalidToken(BankError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "InvalidToken"
    message = "Invalid or expired token."


# Authorization / lookup

class Forbidden(BankError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "Forbidden"
    message = "You are not authorized to access this resource."


class NotFound(BankError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NotFound"
    message = "Resource not found."


# Administration

class AlreadyApproved(BankError):
    code = "AlreadyApproved"
    message = "User is already approved."


class InvalidState(BankError):
    code = "InvalidState"
    message = "Only pending users can be rejected."


# Beneficiaries

class RecipientNotFound(BankError):
    code = "RecipientNotFound"
    message = "Recipient user not found or not approved."


class ForbiddenRecipient(BankError):
    code = "ForbiddenRecipient"
    message = "Administrators cannot be added as beneficiaries."


class SelfReference(BankError):
    code = "SelfReference"
    message = "You cannot add yourself as a beneficiary."


class AlreadyExists(BankError):
    status_code = status.HTTP_409_CONFLICT
    code = "AlreadyExists"
    message = "This beneficiary has already been added by you."


# Transfers

class InvalidAmount(BankError):
    code = "InvalidAmount"
    message = "Amount must be greater than zero."


class SenderUnavailable(BankError):
    code = "SenderUnavailable"
    message = "Sender not found or not approved."


class BeneficiaryNotFound(BankError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "BeneficiaryNotFound"
    message = "Beneficiary not found or does not belong to the sender."


class RecipientUnavailable(BankError):
    code = "RecipientUnavailable"
    message = "Recipient user is not found or not approved."


class InsufficientFunds(BankError):
    code = "InsufficientFunds"
    message = "Insufficient balance."


class TransferFailed(BankError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "TransferFailed"
    message = "An error occurred during transfer. Please try again."
