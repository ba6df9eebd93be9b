from dataclasses import dataclass
from enum import Enum


class Role(str, Enum):
    patient = "patient"
    psychiatrist = "psychiatrist"


@dataclass(frozen=True)
class Principal:
    """Authenticated caller, resolved from the bearer token and passed into services."""

    id: int
    role: Role

    @property
    def is_patient(self) -> bool:
        return self.role == Role.patient

    @property
    def is_psychiatrist(self) -> bool:
        return self.role == Role.psychiatrist
