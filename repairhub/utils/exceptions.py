from fastapi import HTTPException, status


# ═══════════════════════════════════════════════════════════════════════════════
# ERROR CODES - Machine-readable constants for frontend switch/case
# ═══════════════════════════════════════════════════════════════════════════════
class ErrorCode:
    VALIDATION_ERROR        = "VALIDATION_ERROR"
    INVALID_ROLE            = "INVALID_ROLE"
    UNAUTHORIZED            = "UNAUTHORIZED"
    TOKEN_EXPIRED           = "TOKEN_EXPIRED"
    FORBIDDEN               = "FORBIDDEN"
    NOT_FOUND               = "NOT_FOUND"
    COMPANY_NOT_FOUND       = "COMPANY_NOT_FOUND"
    DUPLICATE_ENTRY         = "DUPLICATE_ENTRY"
    CONFLICT                = "CONFLICT"
    PROFILE_INCOMPLETE      = "PROFILE_INCOMPLETE"
    INSUFFICIENT_STOCK      = "INSUFFICIENT_STOCK"
    ACCOUNT_INACTIVE        = "ACCOUNT_INACTIVE"
    RESET_CODE_INVALID      = "RESET_CODE_INVALID"
    INTERNAL_SERVER_ERROR   = "INTERNAL_SERVER_ERROR"


# ═══════════════════════════════════════════════════════════════════════════════
# BASE EXCEPTION
# ═══════════════════════════════════════════════════════════════════════════════
class AppException(HTTPException):
    """
    Base exception for all application-level errors.
    Carries a machine-readable error_code for frontend handling.

    `extra` keys are merged into the top level of the JSON error body, for
    hints the client acts on directly (e.g. `canRegisterAsUnregistered`).
    """
    def __init__(
        self,
        status_code: int,
        message: str,
        error_code: str,
        details: list | None = None,
        field: str | None = None,
        extra: dict | None = None,
    ):
        super().__init__(status_code=status_code, detail={
            "message": message,
            "error": {
                "code": error_code,
                "details": details,
                "field": field,
            },
            "extra": extra or {},
        })


# ═══════════════════════════════════════════════════════════════════════════════
# CONCRETE EXCEPTIONS
# ═══════════════════════════════════════════════════════════════════════════════

class ValidationException(AppException):
    def __init__(self, message: str = "Validation error. Please check your input.",
                 details: list | None = None):
        super().__init__(status.HTTP_400_BAD_REQUEST, message, ErrorCode.VALIDATION_ERROR,
                         details=details)


class InvalidRoleException(AppException):
    def __init__(self, role: str | None = None):
        message = "Invalid role specified." if role is None else f"Invalid role specified: {role}"
        super().__init__(status.HTTP_400_BAD_REQUEST, message, ErrorCode.INVALID_ROLE, field="role")


class UnauthorizedException(AppException):
    def __init__(self, message: str = "Authentication required"):
        super().__init__(status.HTTP_401_UNAUTHORIZED, message, ErrorCode.UNAUTHORIZED)


class TokenExpiredException(AppException):
    def __init__(self):
        super().__init__(status.HTTP_401_UNAUTHORIZED, "Token expired. Please log in again.",
                         ErrorCode.TOKEN_EXPIRED)


class ForbiddenException(AppException):
    def __init__(self, message: str = "You do not have permission to perform this action"):
        super().__init__(status.HTTP_403_FORBIDDEN, message, ErrorCode.FORBIDDEN)


class NotFoundException(AppException):
    def __init__(self, resource: str = "Resource"):
        super().__init__(status.HTTP_404_NOT_FOUND, f"{resource} not found", ErrorCode.NOT_FOUND)


class CompanyNotFoundForDriverException(AppException):
    """Recoverable: the caller may retry the transition as an unregistered driver."""
    def __init__(self):
        super().__init__(
            status.HTTP_400_BAD_REQUEST,
            "Company not found. Would you like to continue as an unregistered driver?",
            ErrorCode.COMPANY_NOT_FOUND,
            field="companyId",
            extra={"canRegisterAsUnregistered": True},
        )


class DuplicateEntryException(AppException):
    """Uniqueness violation. `details` lists each conflicting field."""
    def __init__(self, message: str = "Record already exists", field: str | None = None,
                 details: list | None = None):
        if details is None and field:
            details = [{"field": field, "message": message}]
        super().__init__(status.HTTP_400_BAD_REQUEST, message, ErrorCode.DUPLICATE_ENTRY,
                         details=details, field=field)


class ConflictException(AppException):
    def __init__(self, message: str, field: str | None = None):
        super().__init__(status.HTTP_400_BAD_REQUEST, message, ErrorCode.CONFLICT, field=field)


class ProfileIncompleteException(AppException):
    def __init__(self, company_id: int, required_fields: list[str], completion_endpoint: str):
        super().__init__(
            status.HTTP_400_BAD_REQUEST,
            "Please complete your company profile first",
            ErrorCode.PROFILE_INCOMPLETE,
            extra={
                "companyId":          company_id,
                "requiredFields":     required_fields,
                "completionEndpoint": completion_endpoint,
            },
        )


class InsufficientStockException(AppException):
    def __init__(self, available: int):
        super().__init__(
            status.HTTP_400_BAD_REQUEST,
            f"Insufficient stock. Available: {available}",
            ErrorCode.INSUFFICIENT_STOCK,
            field="quantity",
        )


class AccountInactiveException(AppException):
    def __init__(self):
        super().__init__(
            status.HTTP_403_FORBIDDEN,
            "Your account has been deactivated. Contact admin.",
            ErrorCode.ACCOUNT_INACTIVE,
        )


class ResetCodeInvalidException(AppException):
    def __init__(self):
        super().__init__(status.HTTP_400_BAD_REQUEST, "Invalid or expired reset code.",
                         ErrorCode.RESET_CODE_INVALID, field="resetCode")


class CompanyAlreadyLinkedException(AppException):
    def __init__(self):
        super().__init__(status.HTTP_400_BAD_REQUEST, "Account is already linked to a company",
                         ErrorCode.CONFLICT, field="companyId")
