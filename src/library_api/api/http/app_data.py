from dataclasses import dataclass

from src.library_api.core.services import (
    DbSessionService,
    JwtGeneratorService,
    JwtVerificationService,
    PasswordService,
)


@dataclass
class ApplicationDependencies:
    jwt_verify_service: JwtVerificationService
    jwt_generation_service: JwtGeneratorService
    password_service: PasswordService
    database_service: DbSessionService
