"""Shared fixtures for PCR report tests."""

from __future__ import annotations

import base64
import io
from datetime import datetime, timezone
from typing import Any, Callable

import pytest
from PIL import Image

from pcr_app.schemas.pcr import PcrRecord
from pcr_app.schemas.pdf import PdfOptions
from pcr_app.services.pdfs.surface import DrawingSurface, new_surface

FIXED_NOW = datetime(2026, 3, 14, 9, 26, tzinfo=timezone.utc)


@pytest.fixture
def png_bytes() -> bytes:
    """200x100 red PNG, a stand-in for the injury diagram raster."""
    buf = io.BytesIO()
    Image.new("RGB", (200, 100), (200, 30, 30)).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def png_data_url(png_bytes: bytes) -> str:
    return "data:image/png;base64," + base64.b64encode(png_bytes).decode("ascii")


@pytest.fixture
def record_data(png_data_url: str) -> dict[str, Any]:
    """A fully completed report as the form client sends it (camelCase)."""
    return {
        "date": "2026-03-14",
        "location": "Science Building, Room 204",
        "callNumber": "C-1042",
        "reportNumber": "R-2026-0311",
        "responder1": "Alex Kim",
        "responder2": "Jordan Lee",
        "responder3": "",
        "supervisor": "Sam Patel",
        "primaryPSM": "Riley Chen",
        "timeNotified": "09:02",
        "onScene": "09:06",
        "transportArrived": "09:21",
        "clearedScene": "09:40",
        "paramedicsCalledBy": "Dispatch",
        "firstAgencyOnScene": "Campus EMS",
        "patientName": "Jane Doe",
        "dob": "2001-07-09",
        "age": 24,
        "sex": "Female",
        "status": "Student",
        "workplaceInjury": "No",
        "studentEmployeeNumber": "S1234567",
        "emergencyContactName": "John Doe (Father)",
        "emergencyContactPhone": "555-0100",
        "contacted": "Yes",
        "contactedBy": "Sam Patel",
        "chiefComplaint": "Shortness of breath after climbing stairs",
        "signsSymptoms": "Wheezing, increased work of breathing, speaking in short sentences",
        "allergies": "Penicillin",
        "medications": "Salbutamol inhaler PRN",
        "medicalHistory": "Asthma since childhood",
        "lastMeal": "Breakfast at 07:30",
        "bodySurvey": "No trauma found. Chest rise equal bilaterally.",
        "airwayManagement": ["OPA", "Other"],
        "airwayManagementOther": "Positioning",
        "hemorrhageControl": ["Direct Pressure", "Tourniquet"],
        "timeApplied": "09:10",
        "numberOfTurns": 3,
        "immobilization": [],
        "positionOfPatient": "Seated, tripod",
        "onset": "Sudden",
        "provocation": "Exertion",
        "quality": "Tight",
        "radiation": "None",
        "scale": "6/10",
        "time": "09:00",
        "comments": "Patient found seated in hallway in respiratory distress. Assisted with inhaler.",
        "transferComments": "Care handed over with verbal report.",
        "hospitalDestination": "General Hospital",
        "patientCareTransferred": "Paramedics",
        "unitNumber": "M-12",
        "timeCareTransferred": "09:35",
        "injuryCanvas": '{"imageData": "%s", "strokes": []}' % png_data_url,
        "vitalSigns": [
            {"time": "09:07", "pulse": 112, "resp": 28, "bp": "138/88", "loc": "A&Ox4 GCS 15",
             "skin": "Pale, cool", "pupils": "PERRL"},
            {"time": "", "pulse": "", "resp": "", "bp": "", "loc": "", "skin": "", "pupils": ""},
            {"time": "09:17", "pulse": 98, "resp": 22, "bp": "130/84", "loc": "A&Ox4", "skin": "Pink",
             "pupils": "PERRL"},
        ],
        "vitalSigns2": [
            {"time": "09:07", "spo2": 89},
            {"time": "09:12", "spo2": ""},
            {"time": "09:17", "spo2": 95},
        ],
        "oxygenProtocol": {
            "saturationRange": "other",
            "spo2": 89,
            "spo2Acceptable": "no",
            "oxygenGiven": "yes",
            "o2Supervisor": "Sam Patel",
            "reasonForO2Therapy": ["Shortness of breath", "Other"],
            "reasonForO2TherapyOther": "Low SpO2",
            "timeTherapyStarted": "09:08",
            "timeTherapyEnded": "09:34",
            "flowRate": 4,
            "deliveryDevice": "Nasal cannula",
            "flowRateAlterations": [
                {"time": "09:15", "flowRate": 6},
                {"time": "", "flowRate": ""},
            ],
            "reasonForEndingTherapy": "Care transferred to paramedics",
            "whoStartedTherapy": "Alex Kim",
        },
    }


@pytest.fixture
def record(record_data: dict[str, Any]) -> PcrRecord:
    return PcrRecord.model_validate(record_data)


@pytest.fixture
def minimal_record() -> PcrRecord:
    return PcrRecord(date="2026-03-14", patient_name="Jane Doe", call_number="C-1", report_number="R-1")


@pytest.fixture
def options() -> PdfOptions:
    """Default options with the banner timestamp pinned for reproducible bytes."""
    return PdfOptions(generated_at=FIXED_NOW)


@pytest.fixture
def make_surface(options: PdfOptions) -> Callable[..., DrawingSurface]:
    def _make(opts: PdfOptions | None = None, *, trace: bool = True) -> DrawingSurface:
        return new_surface(io.BytesIO(), opts or options, trace=trace)

    return _make
