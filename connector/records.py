"""In-memory clinic records with optional JSON file backing.

Holds the patients, doctors and appointments the check-in engine refers to.
The engine only reads appointments, flips their status and creates walk-in
appointments; everything else here serves the console and the tests.
"""
from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from frontdesk import timeutil

logger = logging.getLogger(__name__)

APPOINTMENT_STATUSES = (
    "Scheduled",
    "Checked In",
    "In Progress",
    "Completed",
    "Cancelled",
    "No Show",
)


def canonical_appointment_status(status: Optional[str]) -> str:
    if status is None or not status.strip():
        raise ValueError("Status cannot be blank")
    text = status.strip()
    for allowed in APPOINTMENT_STATUSES:
        if allowed.lower() == text.lower():
            return allowed
    raise ValueError(f"Invalid status {status!r}. Allowed: {', '.join(APPOINTMENT_STATUSES)}")


def _check_no_delimiter(value: Optional[str], label: str) -> Optional[str]:
    if value is None or not value.strip():
        return None
    if "|" in value:
        raise ValueError(f"{label} cannot contain '|'")
    if "\n" in value or "\r" in value:
        raise ValueError(f"{label} cannot contain line breaks")
    return value.strip()


@dataclass
class Appointment:
    """A booked visit between a patient and a doctor."""

    id: int
    patient_id: int
    doctor_id: int
    date: str
    time: str
    duration_minutes: int
    status: str = "Scheduled"
    location: Optional[str] = None
    follow_up: Optional[str] = None
    reason: Optional[str] = None
    notes: Optional[str] = None

    @property
    def start(self) -> datetime:
        return timeutil.combine(self.date, self.time)

    @property
    def start_text(self) -> str:
        return f"{self.date} {self.time}"


@dataclass
class Person:
    id: int
    name: str


class ClinicRecords:
    """Patients, doctors and appointments with sequential id allocation."""

    def __init__(self, path: Optional[Path | str] = None) -> None:
        self._path = Path(path) if path else None
        self._patients: Dict[int, Person] = {}
        self._doctors: Dict[int, Person] = {}
        self._appointments: Dict[int, Appointment] = {}
        self._sequences: Dict[str, int] = {"patient": 1, "doctor": 1, "appointment": 1}

    @classmethod
    def load(cls, path: Path | str) -> "ClinicRecords":
        """Read records from ``path``; a missing file gives empty records."""

        records = cls(path)
        file_path = Path(path)
        if not file_path.exists():
            return records
        try:
            payload = json.loads(file_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ValueError(f"Clinic records in {file_path} are corrupted: {exc.msg}") from exc
        if not isinstance(payload, dict):
            raise ValueError("Clinic records file must contain a JSON object.")

        for entry in payload.get("patients", []):
            person = Person(id=int(entry["id"]), name=str(entry["name"]))
            records._patients[person.id] = person
        for entry in payload.get("doctors", []):
            person = Person(id=int(entry["id"]), name=str(entry["name"]))
            records._doctors[person.id] = person
        for entry in payload.get("appointments", []):
            appointment = Appointment(**entry)
            records._appointments[appointment.id] = appointment
        records._sequences.update(
            {key: int(value) for key, value in payload.get("sequences", {}).items()}
        )
        return records

    def save(self) -> None:
        if self._path is None:
            return
        payload = {
            "patients": [asdict(p) for p in self._patients.values()],
            "doctors": [asdict(d) for d in self._doctors.values()],
            "appointments": [asdict(a) for a in self._appointments.values()],
            "sequences": dict(self._sequences),
        }
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(f"{json.dumps(payload, indent=2)}\n", encoding="utf-8")

    def _next(self, kind: str) -> int:
        value = self._sequences[kind]
        self._sequences[kind] = value + 1
        return value

    # -- patients and doctors -------------------------------------------------

    def register_patient(self, name: str) -> Person:
        if not name or not name.strip():
            raise ValueError("name must be provided")
        person = Person(id=self._next("patient"), name=name.strip())
        self._patients[person.id] = person
        self.save()
        return person

    def register_doctor(self, name: str) -> Person:
        if not name or not name.strip():
            raise ValueError("name must be provided")
        person = Person(id=self._next("doctor"), name=name.strip())
        self._doctors[person.id] = person
        self.save()
        return person

    def patient_exists(self, patient_id: int) -> bool:
        return patient_id in self._patients

    def doctor_exists(self, doctor_id: int) -> bool:
        return doctor_id in self._doctors

    def get_patient(self, patient_id: int) -> Optional[Person]:
        return self._patients.get(patient_id)

    # -- appointments ---------------------------------------------------------

    def get_appointment(self, appointment_id: int) -> Optional[Appointment]:
        return self._appointments.get(appointment_id)

    def appointment_exists(self, appointment_id: int) -> bool:
        return appointment_id in self._appointments

    def list_appointments(self) -> List[Appointment]:
        return sorted(self._appointments.values(), key=lambda appointment: appointment.id)

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
        if not self.patient_exists(patient_id):
            raise ValueError(f"Patient {patient_id} does not exist")
        if not self.doctor_exists(doctor_id):
            raise ValueError(f"Doctor {doctor_id} does not exist")

        appointment = Appointment(
            id=self._next("appointment"),
            patient_id=patient_id,
            doctor_id=doctor_id,
            date=timeutil.normalize_date(date),
            time=timeutil.normalize_time(time),
            duration_minutes=timeutil.parse_duration_to_minutes(duration),
            status=canonical_appointment_status(status),
            location=_check_no_delimiter(location, "Location"),
            follow_up=timeutil.normalize_date(follow_up) if follow_up else None,
            reason=_check_no_delimiter(reason, "Reason"),
            notes=_check_no_delimiter(notes, "Notes"),
        )
        self._appointments[appointment.id] = appointment
        self.save()
        logger.info(
            "Created appointment %s for patient %s with doctor %s",
            appointment.id,
            patient_id,
            doctor_id,
        )
        return appointment

    def book_appointment(
        self, patient_id: int, doctor_id: int, date: str, time: str, duration: str = "00:30"
    ) -> Appointment:
        return self.create_appointment(patient_id, doctor_id, date, time, duration)

    def set_appointment_status(self, appointment_id: int, status: str) -> Appointment:
        appointment = self._appointments.get(appointment_id)
        if appointment is None:
            raise KeyError(f"Appointment {appointment_id} does not exist")
        appointment.status = canonical_appointment_status(status)
        self.save()
        return appointment
