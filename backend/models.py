"""
SWMS document value objects.

The renderer consumes one SWMSDocument per call. It is parsed once from the
JSON payload posted by the form layer (camelCase keys, legacy aliases
accepted) and never mutated afterwards.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from errors import InvalidDocumentError, RenderWarning
from risk import RiskTier, coerce_score, tier_for_level

logger = logging.getLogger(__name__)


# =============================================================================
# FIELD COERCION
# =============================================================================

def _first(data: Dict[str, Any], *keys: str) -> Any:
    """Return the first present, non-None value among alias keys."""
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return None


def _text(value: Any, field_name: str) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bool):
        raise InvalidDocumentError(f"Field '{field_name}' must be text")
    if isinstance(value, (int, float)):
        return str(value)
    if not isinstance(value, str):
        raise InvalidDocumentError(f"Field '{field_name}' must be text")
    value = value.strip()
    return value or None


def _text_list(value: Any, field_name: str) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        raise InvalidDocumentError(f"Field '{field_name}' must be a list of text")
    items = []
    for item in value:
        text = _text(item, field_name)
        if text:
            items.append(text)
    return tuple(items)


def _object_list(value: Any, field_name: str) -> List[Dict[str, Any]]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise InvalidDocumentError(f"Field '{field_name}' must be a list")
    for item in value:
        if not isinstance(item, dict):
            raise InvalidDocumentError(f"Entries of '{field_name}' must be objects")
    return value


def _score(value: Any) -> Any:
    """
    Unwrap legacy {"level": ..., "score": n} risk objects.

    An object with a level but no score yields the level's RiskTier.
    """
    if isinstance(value, dict):
        if value.get("score") is not None:
            return value["score"]
        level = value.get("level")
        if level in (None, ""):
            return None
        tier = tier_for_level(level)
        if tier is None:
            raise InvalidDocumentError(f"Unknown risk level: {level!r}", section="work_activities")
        return tier
    return value


def _flag(value: Any, field_name: str) -> Optional[bool]:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        text = value.strip().lower()
        if text in ("yes", "y", "true", "1"):
            return True
        if text in ("no", "n", "false", "0"):
            return False
        if not text:
            return None
    raise InvalidDocumentError(f"Field '{field_name}' must be yes/no")


def _catalog_id(value: Any) -> Any:
    """HRCW ids arrive as ints or numeric strings; anything else is kept for the catalog to reject."""
    if isinstance(value, dict):
        value = value.get("id")
    if isinstance(value, bool):
        # JSON true/false must not match category 1 or 0
        return str(value).lower()
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return value


# =============================================================================
# VALUE OBJECTS
# =============================================================================

@dataclass(frozen=True)
class ProjectInfo:
    company_name: Optional[str] = None
    project_name: Optional[str] = None
    job_number: Optional[str] = None
    project_address: Optional[str] = None
    start_date: Optional[str] = None
    duration: Optional[str] = None
    project_description: Optional[str] = None


@dataclass(frozen=True)
class Personnel:
    principal_contractor: Optional[str] = None
    project_manager: Optional[str] = None
    site_supervisor: Optional[str] = None
    authorised_person: Optional[str] = None
    authorised_position: Optional[str] = None


@dataclass(frozen=True)
class WorkActivity:
    """One row of the work activities & risk assessment table."""
    name: Optional[str]
    hazards: Tuple[str, ...] = ()
    control_measures: Tuple[str, ...] = ()
    legislation: Tuple[str, ...] = ()
    initial_risk_score: Any = None
    residual_risk_score: Any = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WorkActivity":
        return cls(
            name=_text(_first(data, "activity", "name", "task", "description"), "activity"),
            hazards=_text_list(data.get("hazards"), "hazards"),
            control_measures=_text_list(data.get("controlMeasures"), "controlMeasures"),
            legislation=_text_list(data.get("legislation"), "legislation"),
            initial_risk_score=_score(_first(data, "initialRiskScore", "initialRisk")),
            residual_risk_score=_score(_first(data, "residualRiskScore", "residualRisk")),
        )


@dataclass(frozen=True)
class PlantEquipment:
    """One entry of the plant & equipment register."""
    name: Optional[str]
    model: Optional[str] = None
    serial_number: Optional[str] = None
    hazards: Tuple[str, ...] = ()
    control_measures: Tuple[str, ...] = ()
    risk_level: Optional[RiskTier] = None
    next_inspection: Optional[str] = None
    certification_required: Optional[bool] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlantEquipment":
        raw_level = data.get("riskLevel")
        risk_level = None
        if raw_level not in (None, ""):
            risk_level = tier_for_level(raw_level)
            if risk_level is None:
                raise InvalidDocumentError(
                    f"Unknown equipment risk level: {raw_level!r} (expected Low, Medium, High or Extreme)",
                    section="plant_equipment",
                )
        return cls(
            name=_text(_first(data, "equipment", "name"), "equipment"),
            model=_text(data.get("model"), "model"),
            serial_number=_text(_first(data, "serialNumber", "serial"), "serialNumber"),
            hazards=_text_list(data.get("hazards"), "hazards"),
            control_measures=_text_list(data.get("controlMeasures"), "controlMeasures"),
            risk_level=risk_level,
            next_inspection=_text(data.get("nextInspection"), "nextInspection"),
            certification_required=_flag(data.get("certificationRequired"), "certificationRequired"),
        )


@dataclass(frozen=True)
class EmergencyContact:
    name: Optional[str]
    phone: Optional[str]


@dataclass(frozen=True)
class EmergencyInfo:
    contacts: Tuple[EmergencyContact, ...] = ()
    procedures: Tuple[str, ...] = ()
    monitoring: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.contacts and not self.procedures and not self.monitoring

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "EmergencyInfo":
        """Read the nested ``emergency`` object or the legacy flat keys."""
        nested = data.get("emergency")
        if nested is not None and not isinstance(nested, dict):
            raise InvalidDocumentError("Field 'emergency' must be an object", section="emergency")
        nested = nested or {}

        legacy_procedures = data.get("emergencyProcedures")
        if isinstance(legacy_procedures, dict):
            legacy = legacy_procedures
            legacy_procedures = legacy.get("procedures")
        else:
            legacy = {}

        raw_contacts = _first(nested, "contacts")
        if raw_contacts is None:
            raw_contacts = _first(data, "emergencyContacts")
        if raw_contacts is None:
            raw_contacts = legacy.get("contacts")

        contacts = []
        for item in _object_list(raw_contacts, "emergency.contacts"):
            contact = EmergencyContact(
                name=_text(item.get("name"), "emergency.contacts.name"),
                phone=_text(_first(item, "phone", "number"), "emergency.contacts.phone"),
            )
            if contact.name or contact.phone:
                contacts.append(contact)

        procedures = nested.get("procedures")
        if procedures is None:
            procedures = _first(data, "emergencyResponseProcedures")
        if procedures is None:
            procedures = legacy_procedures

        monitoring = _first(nested, "monitoring")
        if monitoring is None:
            monitoring = _first(data, "emergencyMonitoring", "monitoringRequirements")

        return cls(
            contacts=tuple(contacts),
            procedures=_text_list(procedures, "emergency.procedures"),
            monitoring=_text(monitoring, "emergency.monitoring"),
        )


@dataclass(frozen=True)
class SWMSDocument:
    """The complete input of one render call."""
    project: ProjectInfo = field(default_factory=ProjectInfo)
    personnel: Personnel = field(default_factory=Personnel)
    work_activities: Tuple[WorkActivity, ...] = ()
    hrcw_categories: Tuple[Any, ...] = ()
    ppe_required: Tuple[str, ...] = ()
    ppe_recommended: Tuple[str, ...] = ()
    plant_equipment: Tuple[PlantEquipment, ...] = ()
    emergency: EmergencyInfo = field(default_factory=EmergencyInfo)

    @property
    def reference(self) -> str:
        """Short identifier printed in page footers."""
        parts = [p for p in (self.project.job_number, self.project.project_name) if p]
        return " – ".join(parts) if parts else "SWMS"

    @classmethod
    def from_dict(cls, data: Any) -> "SWMSDocument":
        """
        Build a document from the form layer's JSON payload.

        Args:
            data: Decoded JSON object

        Returns:
            SWMSDocument

        Raises:
            InvalidDocumentError: if the payload is structurally invalid
        """
        if not isinstance(data, dict):
            raise InvalidDocumentError("SWMS document must be a JSON object")

        project = ProjectInfo(
            company_name=_text(data.get("companyName"), "companyName"),
            project_name=_text(_first(data, "projectName", "jobName", "title"), "projectName"),
            job_number=_text(_first(data, "jobNumber", "projectNumber"), "jobNumber"),
            project_address=_text(_first(data, "projectAddress", "projectLocation"), "projectAddress"),
            start_date=_text(data.get("startDate"), "startDate"),
            duration=_text(data.get("duration"), "duration"),
            project_description=_text(_first(data, "projectDescription", "scopeOfWorks"), "projectDescription"),
        )
        personnel = Personnel(
            principal_contractor=_text(data.get("principalContractor"), "principalContractor"),
            project_manager=_text(data.get("projectManager"), "projectManager"),
            site_supervisor=_text(data.get("siteSupervisor"), "siteSupervisor"),
            authorised_person=_text(data.get("authorisedPerson"), "authorisedPerson"),
            authorised_position=_text(data.get("authorisedPosition"), "authorisedPosition"),
        )

        activities = tuple(
            WorkActivity.from_dict(item)
            for item in _object_list(_first(data, "workActivities", "activities"), "workActivities")
        )
        equipment = tuple(
            PlantEquipment.from_dict(item)
            for item in _object_list(data.get("plantEquipment"), "plantEquipment")
        )

        raw_hrcw = data.get("hrcwCategories")
        if raw_hrcw is None:
            raw_hrcw = []
        if not isinstance(raw_hrcw, list):
            raise InvalidDocumentError("Field 'hrcwCategories' must be a list", section="high_risk_activities")
        hrcw = []
        for item in raw_hrcw:
            if isinstance(item, dict) and item.get("selected") is False:
                continue
            category_id = _catalog_id(item)
            if category_id not in hrcw:
                hrcw.append(category_id)

        required, recommended = _parse_ppe(data.get("ppeRequirements"), data.get("ppeRecommended"))

        return cls(
            project=project,
            personnel=personnel,
            work_activities=activities,
            hrcw_categories=tuple(hrcw),
            ppe_required=required,
            ppe_recommended=recommended,
            plant_equipment=equipment,
            emergency=EmergencyInfo.from_payload(data),
        )

    def validate(self) -> List[RenderWarning]:
        """
        Check cross-field invariants the form layer does not enforce.

        Returns:
            Warnings for logically inconsistent but renderable content
        """
        warnings: List[RenderWarning] = []
        for index, activity in enumerate(self.work_activities, start=1):
            initial = coerce_score(activity.initial_risk_score)
            residual = coerce_score(activity.residual_risk_score)
            if initial is not None and residual is not None and residual > initial:
                name = activity.name or f"Activity {index}"
                message = f"{name}: residual risk {residual} exceeds initial risk {initial}"
                logger.warning(message)
                warnings.append(RenderWarning("residual_exceeds_initial", message, section="work_activities"))
        return warnings


def _parse_ppe(required_raw: Any, recommended_raw: Any) -> Tuple[Tuple[str, ...], Tuple[str, ...]]:
    """Split PPE selections into required and recommended id lists, keeping first occurrence."""
    required: List[str] = []
    recommended: List[str] = []

    for raw, target, field_name in (
        (required_raw, required, "ppeRequirements"),
        (recommended_raw, recommended, "ppeRecommended"),
    ):
        if raw is None:
            continue
        if not isinstance(raw, list):
            raise InvalidDocumentError(f"Field '{field_name}' must be a list", section="ppe")
        for item in raw:
            bucket = target
            if isinstance(item, dict):
                if item.get("selected") is False:
                    continue
                if item.get("required") is False:
                    bucket = recommended
                item = item.get("id")
            if not isinstance(item, str) or not item.strip():
                raise InvalidDocumentError(f"Entries of '{field_name}' must be PPE ids", section="ppe")
            item_id = item.strip()
            if item_id not in required and item_id not in recommended:
                bucket.append(item_id)

    return tuple(required), tuple(recommended)
