"""Front-desk console: register arrivals and work the waiting queues."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Callable, Dict, Optional, Sequence, TextIO

if __package__ is None or __package__ == "":  # pragma: no cover - runtime safety for script execution
    sys.path.append(str(Path(__file__).resolve().parent.parent))

from connector import ClinicRecords
from frontdesk import (
    CheckIn,
    CheckInError,
    CheckInResult,
    CheckInService,
    HistoryArchive,
    HistoryRecord,
    SnapshotStore,
)
from frontdesk.config import Settings, load_settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class Console:
    """Binds parsed commands to the records and the check-in service."""

    def __init__(self, settings: Settings, out: TextIO = sys.stdout) -> None:
        self.records = ClinicRecords.load(settings.records_file)
        self.service = CheckInService(
            self.records,
            self.records,
            store=SnapshotStore(settings.snapshot_file),
            archive=HistoryArchive(settings.history_file),
        )
        self._out = out

    def say(self, message: str) -> None:
        self._out.write(f"{message}\n")

    def report(self, result: Optional[CheckInResult], empty_message: str = "") -> None:
        if result is None:
            self.say(empty_message)
            return
        self.say(describe_check_in(result.check_in))
        for warning in result.warnings:
            self.say(f"warning: {warning.message}")

    # -- records --------------------------------------------------------------

    def add_patient(self, args: argparse.Namespace) -> None:
        patient = self.records.register_patient(args.name)
        self.say(f"Patient {patient.id}: {patient.name}")

    def add_doctor(self, args: argparse.Namespace) -> None:
        doctor = self.records.register_doctor(args.name)
        self.say(f"Doctor {doctor.id}: {doctor.name}")

    def book(self, args: argparse.Namespace) -> None:
        appointment = self.records.create_appointment(
            args.patient_id,
            args.doctor_id,
            args.date,
            args.time,
            args.duration,
            reason=args.reason,
            notes=args.notes,
        )
        self.say(f"Appointment {appointment.id} booked for {appointment.start_text}")

    def appointments(self, args: argparse.Namespace) -> None:
        listed = self.records.list_appointments()
        if not listed:
            self.say("No appointments.")
        for appointment in listed:
            self.say(
                f"#{appointment.id} patient={appointment.patient_id} "
                f"doctor={appointment.doctor_id} {appointment.start_text} [{appointment.status}]"
            )

    # -- check-ins ------------------------------------------------------------

    def check_in(self, args: argparse.Namespace) -> None:
        self.report(self.service.check_in_scheduled(args.appointment_id, args.desk, args.notes))

    def walk_in(self, args: argparse.Namespace) -> None:
        self.report(
            self.service.check_in_walk_in(
                args.patient_id,
                args.doctor_id,
                args.date,
                args.time,
                args.duration,
                priority=args.priority,
                desk=args.desk,
                reason=args.reason,
                notes=args.notes,
            )
        )

    def call_next(self, args: argparse.Namespace) -> None:
        if args.queue == "walk-in":
            result = self.service.call_next_walk_in()
        else:
            result = self.service.call_next_scheduled()
        self.report(result, empty_message=f"No {args.queue} patients waiting.")

    def complete(self, args: argparse.Namespace) -> None:
        self.report(self.service.mark_completed(args.check_in_id))

    def call(self, args: argparse.Namespace) -> None:
        self.report(self.service.mark_called(args.check_in_id))

    def priority(self, args: argparse.Namespace) -> None:
        check_in = self.service.update_walk_in_priority(args.check_in_id, args.priority)
        self.say(describe_check_in(check_in))

    def desk(self, args: argparse.Namespace) -> None:
        self.say(describe_check_in(self.service.update_desk(args.check_in_id, args.desk)))

    def notes(self, args: argparse.Namespace) -> None:
        self.say(describe_check_in(self.service.update_notes(args.check_in_id, args.notes)))

    def delete(self, args: argparse.Namespace) -> None:
        if self.service.delete_check_in(args.check_in_id):
            self.say(f"Deleted check-in {args.check_in_id}")
        else:
            self.say(f"Check-in {args.check_in_id} not found")

    def queue(self, args: argparse.Namespace) -> None:
        for title, entries in (
            ("Walk-in queue", self.service.list_walk_in_queue()),
            ("Scheduled queue", self.service.list_scheduled_queue()),
        ):
            self.say(f"{title} ({len(entries)})")
            for position, check_in in enumerate(entries, start=1):
                self.say(f"  {position}. {describe_check_in(check_in)}")

    def history(self, args: argparse.Namespace) -> None:
        records = self.service.list_history(args.patient_id)
        if not records:
            self.say("No completed check-ins.")
        for record in records:
            self.say(describe_history(record))

    def clear_history(self, args: argparse.Namespace) -> None:
        if not args.yes:
            raise ValueError("clear-history deletes the archive permanently; pass --yes to confirm")
        self.service.clear_history()
        self.say("History cleared.")


def describe_check_in(check_in: CheckIn) -> str:
    kind = f"walk-in p{check_in.priority}" if check_in.walk_in else "scheduled"
    parts = [
        f"#{check_in.id}",
        f"appt={check_in.appointment_id}",
        f"patient={check_in.patient_id}",
        kind,
        check_in.status,
        f"in={check_in.checked_in_at}",
    ]
    if check_in.completed_at:
        parts.append(f"done={check_in.completed_at}")
    if check_in.desk:
        parts.append(f"desk={check_in.desk}")
    if check_in.notes:
        parts.append(f"notes={check_in.notes}")
    return " ".join(parts)


def describe_history(record: HistoryRecord) -> str:
    kind = "walk-in" if record.walk_in else "scheduled"
    return (
        f"#{record.check_in_id} appt={record.appointment_id} patient={record.patient_id} "
        f"doctor={record.doctor_id} {kind} in={record.checked_in_at or '-'} "
        f"done={record.completed_at or '-'}"
    )


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Clinic front-desk check-in console")
    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        help="Logging verbosity",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    for name in ("add-patient", "add-doctor"):
        sub = commands.add_parser(name, help=f"Register a {name.split('-')[1]}")
        sub.add_argument("name")

    book = commands.add_parser("book", help="Book a scheduled appointment")
    _add_visit_arguments(book)

    commands.add_parser("appointments", help="List appointments")

    check_in = commands.add_parser("check-in", help="Check in a scheduled appointment")
    check_in.add_argument("appointment_id", type=int)
    check_in.add_argument("--desk")
    check_in.add_argument("--notes")

    walk_in = commands.add_parser("walk-in", help="Register a walk-in patient")
    _add_visit_arguments(walk_in)
    walk_in.add_argument("--priority", type=int, default=0)
    walk_in.add_argument("--desk")

    call_next = commands.add_parser("call-next", help="Call the next waiting patient")
    call_next.add_argument("queue", choices=("walk-in", "scheduled"))

    for name, help_text in (
        ("complete", "Mark a check-in completed"),
        ("call", "Call a specific check-in"),
        ("delete", "Delete a check-in without archiving it"),
    ):
        sub = commands.add_parser(name, help=help_text)
        sub.add_argument("check_in_id", type=int)

    priority = commands.add_parser("priority", help="Change a walk-in's priority")
    priority.add_argument("check_in_id", type=int)
    priority.add_argument("priority", type=int)

    desk = commands.add_parser("desk", help="Set the desk of a check-in")
    desk.add_argument("check_in_id", type=int)
    desk.add_argument("desk", nargs="?")

    notes = commands.add_parser("notes", help="Set the notes of a check-in")
    notes.add_argument("check_in_id", type=int)
    notes.add_argument("notes", nargs="?")

    commands.add_parser("queue", help="Show both waiting queues")

    history = commands.add_parser("history", help="Show completed check-ins")
    history.add_argument("--patient-id", type=int)

    clear = commands.add_parser("clear-history", help="Delete the history archive")
    clear.add_argument("--yes", action="store_true")
    return parser


def _add_visit_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("patient_id", type=int)
    parser.add_argument("doctor_id", type=int)
    parser.add_argument("date", help="dd-MM-yyyy")
    parser.add_argument("time", help="HH:mm")
    parser.add_argument("--duration", default="00:30", help="HH:mm")
    parser.add_argument("--reason")
    parser.add_argument("--notes")


COMMANDS: Dict[str, Callable[[Console, argparse.Namespace], None]] = {
    "add-patient": Console.add_patient,
    "add-doctor": Console.add_doctor,
    "book": Console.book,
    "appointments": Console.appointments,
    "check-in": Console.check_in,
    "walk-in": Console.walk_in,
    "call-next": Console.call_next,
    "complete": Console.complete,
    "call": Console.call,
    "priority": Console.priority,
    "desk": Console.desk,
    "notes": Console.notes,
    "delete": Console.delete,
    "queue": Console.queue,
    "history": Console.history,
    "clear-history": Console.clear_history,
}


def main(
    argv: Optional[Sequence[str]] = None,
    *,
    settings: Optional[Settings] = None,
    out: TextIO = sys.stdout,
    err: TextIO = sys.stderr,
) -> int:
    settings = settings or load_settings()
    args = build_parser(settings).parse_args(list(argv) if argv is not None else None)
    logging.basicConfig(level=getattr(logging, args.log_level, logging.INFO), format=LOG_FORMAT)

    try:
        console = Console(settings, out=out)
        COMMANDS[args.command](console, args)
    except (CheckInError, ValueError, LookupError) as exc:
        err.write(f"error: {exc}\n")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
