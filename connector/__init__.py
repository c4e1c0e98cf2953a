"""Connector interfaces to the clinic's patient, doctor and appointment records."""

from __future__ import annotations

from typing import Optional, Protocol

from .records import (
    APPOINTMENT_STATUSES,
    Appointment,
    ClinicRecords,
    Person,
    canonical_appointment_status,
)


class AppointmentGateway(Protocol):
    """Appointment operations the check-in engine relies on."""

    def get_appointment(self, appointment_id: int) -> Optional[Appointment]:
        """Return the appointment or ``None`` when it does not exist."""

    def appointment_exists(self, appointment_id: int) -> bool:
        """Return whether the appointment exists."""

    def set_appointment_status(self, appointment_id: int, status: str) -> object:
        """Change the appointment status; raise on failure."""

    def create_appointment(
        self,
        patient_id: int,
        doctor_id: int,
        date: str,
        time: str,
        duration: str,
        status: str = "Scheduled",
        location: Optional[str] = None,
        follow_up: Optional[str] = None,
        reason: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Appointment:
        """Create and return a new appointment; raise ``ValueError`` on bad input."""


class ClinicDirectory(Protocol):
    """Existence checks for patients and doctors."""

    def patient_exists(self, patient_id: int) -> bool:
        """Return whether the patient is registered."""

    def doctor_exists(self, doctor_id: int) -> bool:
        """Return whether the doctor is registered."""


__all__ = [
    "APPOINTMENT_STATUSES",
    "Appointment",
    "AppointmentGateway",
    "ClinicDirectory",
    "ClinicRecords",
    "Person",
    "canonical_appointment_status",
]
