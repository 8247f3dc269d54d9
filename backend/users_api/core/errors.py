from dataclasses import dataclass
from typing import Any


@dataclass
class ServiceResult:
    """Resultado estructurado de una operación del servicio: (code, message)."""

    code: int
    message: Any


class ServiceError(Exception):
    code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_result(self) -> ServiceResult:
        return ServiceResult(code=self.code, message=self.message)


class ValidationError(ServiceError):
    code = 400


class ConflictError(ServiceError):
    code = 400


class InternalError(ServiceError):
    code = 500
