from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from pcr_app.utils.text import is_blank, join_filled


# Records arrive from the form client in camelCase; snake_case is accepted too.
_RECORD_CONFIG = ConfigDict(
    frozen=True,
    extra="ignore",
    alias_generator=to_camel,
    populate_by_name=True,
    coerce_numbers_to_str=True,
)


# --------------------
# Time series
# --------------------
class VitalSignEntry(BaseModel):
    model_config = _RECORD_CONFIG

    time: Optional[str] = None
    pulse: Optional[str] = None
    resp: Optional[str] = None
    bp: Optional[str] = None
    loc: Optional[str] = None
    skin: Optional[str] = None
    pupils: Optional[str] = None

    def cells(self) -> List[str]:
        return [v or "" for v in (self.time, self.pulse, self.resp, self.bp, self.loc, self.skin, self.pupils)]

    @property
    def is_blank(self) -> bool:
        return all(is_blank(c) for c in self.cells())


class Spo2Reading(BaseModel):
    model_config = _RECORD_CONFIG

    time: Optional[str] = None
    spo2: Optional[str] = None

    @property
    def is_blank(self) -> bool:
        # a reading without a value is not charted, even if it has a time
        return is_blank(self.spo2)


class FlowRateAlteration(BaseModel):
    model_config = _RECORD_CONFIG

    time: Optional[str] = None
    flow_rate: Optional[str] = None

    @property
    def is_blank(self) -> bool:
        return is_blank(self.time) and is_blank(self.flow_rate)


# --------------------
# Oxygen protocol
# --------------------
class OxygenProtocol(BaseModel):
    model_config = _RECORD_CONFIG

    saturation_range: Optional[Literal["copd", "other"]] = None
    spo2: Optional[str] = None
    spo2_acceptable: Optional[Literal["yes", "no"]] = None
    oxygen_given: Optional[Literal["yes", "no"]] = None
    o2_supervisor: Optional[str] = None
    o2_responder1: Optional[str] = None
    o2_responder2: Optional[str] = None
    o2_responder3: Optional[str] = None
    reason_for_o2_therapy: List[str] = Field(default_factory=list)
    reason_for_o2_therapy_other: Optional[str] = None
    time_therapy_started: Optional[str] = None
    time_therapy_ended: Optional[str] = None
    flow_rate: Optional[str] = None
    delivery_device: Optional[str] = None
    flow_rate_alterations: List[FlowRateAlteration] = Field(default_factory=list)
    reason_for_ending_therapy: Optional[str] = None
    who_started_therapy: Optional[str] = None

    @property
    def therapy_given(self) -> bool:
        return self.oxygen_given == "yes"

    @property
    def has_saturation(self) -> bool:
        return bool(self.saturation_range) or self.spo2 is not None or bool(self.spo2_acceptable)

    def reasons_text(self) -> str:
        reasons = [r for r in self.reason_for_o2_therapy if r and r != "Other"]
        if "Other" in self.reason_for_o2_therapy:
            reasons.append(f"Other ({self.reason_for_o2_therapy_other})" if self.reason_for_o2_therapy_other else "Other")
        return join_filled(reasons)

    def filled_alterations(self) -> List[FlowRateAlteration]:
        return [a for a in self.flow_rate_alterations if not a.is_blank]


# --------------------
# PCR record
# --------------------
class PcrRecord(BaseModel):
    """
    Immutable Patient Care Report as handed over by the record provider.
    Every narrative/categorical field is optional so that a partially
    completed form can still be previewed; printing additionally requires
    the fields checked by ``validate_record_for_pdf``.
    """

    model_config = _RECORD_CONFIG

    # basic information
    date: Optional[str] = None
    location: Optional[str] = None
    call_number: Optional[str] = None
    report_number: Optional[str] = None
    responder1: Optional[str] = None
    responder2: Optional[str] = None
    responder3: Optional[str] = None
    supervisor: Optional[str] = None
    primary_psm: Optional[str] = Field(default=None, alias="primaryPSM")
    time_notified: Optional[str] = None
    on_scene: Optional[str] = None
    transport_arrived: Optional[str] = None
    cleared_scene: Optional[str] = None
    paramedics_called_by: Optional[str] = None
    first_agency_on_scene: Optional[str] = None

    # patient information
    patient_name: Optional[str] = None
    dob: Optional[str] = None
    age: Optional[str] = None
    sex: Optional[str] = None
    other_sex: Optional[str] = None
    status: Optional[str] = None
    visitor_text: Optional[str] = None
    workplace_injury: Optional[str] = None
    student_employee_number: Optional[str] = None
    emergency_contact_name: Optional[str] = None
    emergency_contact_phone: Optional[str] = None
    contacted: Optional[str] = None
    contacted_by: Optional[str] = None

    # medical history
    chief_complaint: Optional[str] = None
    signs_symptoms: Optional[str] = None
    allergies: Optional[str] = None
    medications: Optional[str] = None
    medical_history: Optional[str] = None
    last_meal: Optional[str] = None
    body_survey: Optional[str] = None

    # treatment performed
    airway_management: List[str] = Field(default_factory=list)
    airway_management_other: Optional[str] = None
    time_started: Optional[str] = None
    number_of_cycles: Optional[str] = None
    number_of_shocks: Optional[str] = None
    shock_not_advised: Optional[str] = None
    hemorrhage_control: List[str] = Field(default_factory=list)
    time_applied: Optional[str] = None
    number_of_turns: Optional[str] = None
    immobilization: List[str] = Field(default_factory=list)
    position_of_patient: Optional[str] = None

    # OPQRST
    onset: Optional[str] = None
    provocation: Optional[str] = None
    quality: Optional[str] = None
    radiation: Optional[str] = None
    scale: Optional[str] = None
    time: Optional[str] = None

    # call description / transfer
    comments: Optional[str] = None
    transfer_comments: Optional[str] = None
    hospital_destination: Optional[str] = None
    patient_care_transferred: Optional[str] = None
    unit_number: Optional[str] = None
    badge_number: Optional[str] = None
    clinic_name: Optional[str] = None
    time_care_transferred: Optional[str] = None

    injury_canvas: Optional[str] = None
    vital_signs: List[VitalSignEntry] = Field(default_factory=list)
    vital_signs2: List[Spo2Reading] = Field(default_factory=list)
    oxygen_protocol: Optional[OxygenProtocol] = None

    # ---- derived views (render-nothing rules live here, not in renderers) ----
    def responders_text(self) -> str:
        return join_filled([self.responder1, self.responder2, self.responder3])

    def sex_text(self) -> str:
        if self.sex == "Other" and self.other_sex:
            return f"Other ({self.other_sex})"
        return self.sex or ""

    def status_text(self) -> str:
        if self.status == "Visitor/Other" and self.visitor_text:
            return f"Visitor/Other ({self.visitor_text})"
        return self.status or ""

    def airway_text(self) -> str:
        items = [a for a in self.airway_management if a and a != "Other"]
        if "Other" in self.airway_management:
            items.append(f"Other ({self.airway_management_other})" if self.airway_management_other else "Other")
        return join_filled(items)

    @property
    def has_tourniquet(self) -> bool:
        return "Tourniquet" in self.hemorrhage_control

    def filled_vital_signs(self) -> List[VitalSignEntry]:
        return [v for v in self.vital_signs if not v.is_blank]

    def filled_spo2_readings(self) -> List[Spo2Reading]:
        return [r for r in self.vital_signs2 if not r.is_blank]
