"""
Leave type catalog.

The set of leave types is closed. Legacy codes (ANNUAL, SICK, OTHER, CONGE_M) stay
valid so that old requests can still be read and counted, but they are hidden and
cannot be submitted anymore.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from app.core.enums import EmployeeGender


class LeaveType(str, Enum):
    ANNUAL_PAID = "ANNUAL_PAID"
    FAMILY_EXCEPTIONAL = "FAMILY_EXCEPTIONAL"
    MENSTRUAL = "MENSTRUAL"
    CONGE_M = "CONGE_M"
    MATERNITY_PATERNITY = "MATERNITY_PATERNITY"
    SICKNESS = "SICKNESS"
    UNPAID = "UNPAID"
    TRAINING = "TRAINING"
    ANNUAL = "ANNUAL"
    SICK = "SICK"
    OTHER = "OTHER"


class LeaveCategory(str, Enum):
    PAID = "PAID"  # consumes the yearly entitlement
    MENSTRUAL = "MENSTRUAL"
    UNPAID = "UNPAID"


@dataclass(frozen=True)
class LeaveTypeOption:
    value: LeaveType
    label: str
    allowed_genders: Optional[Tuple[EmployeeGender, ...]] = None
    hidden: bool = False


LEAVE_TYPE_OPTIONS: Tuple[LeaveTypeOption, ...] = (
    LeaveTypeOption(LeaveType.ANNUAL_PAID, "Annual paid leave"),
    LeaveTypeOption(LeaveType.FAMILY_EXCEPTIONAL, "Exceptional family leave"),
    LeaveTypeOption(LeaveType.MENSTRUAL, "Menstrual leave", (EmployeeGender.FEMALE,)),
    LeaveTypeOption(LeaveType.CONGE_M, "Menstrual leave (legacy)", (EmployeeGender.FEMALE,), hidden=True),
    LeaveTypeOption(LeaveType.MATERNITY_PATERNITY, "Maternity / paternity leave"),
    LeaveTypeOption(LeaveType.SICKNESS, "Sick leave"),
    LeaveTypeOption(LeaveType.UNPAID, "Unpaid leave"),
    LeaveTypeOption(LeaveType.TRAINING, "Training leave"),
    LeaveTypeOption(LeaveType.ANNUAL, "Annual leave (legacy)", hidden=True),
    LeaveTypeOption(LeaveType.SICK, "Sick leave (legacy)", hidden=True),
    LeaveTypeOption(LeaveType.OTHER, "Other (legacy)", hidden=True),
)

_OPTIONS_BY_VALUE = {opt.value: opt for opt in LEAVE_TYPE_OPTIONS}

DEFAULT_LEAVE_TYPE = LeaveType.ANNUAL_PAID

PAID_LEAVE_TYPES: Tuple[LeaveType, ...] = (LeaveType.ANNUAL_PAID, LeaveType.ANNUAL)
MENSTRUAL_LEAVE_TYPES: Tuple[LeaveType, ...] = (LeaveType.MENSTRUAL, LeaveType.CONGE_M)

PAID_LEAVE_VALUES: Tuple[str, ...] = tuple(t.value for t in PAID_LEAVE_TYPES)


def parse_leave_type(value: object) -> Optional[LeaveType]:
    """Return the LeaveType for a raw code, or None when the code is unknown."""
    if isinstance(value, LeaveType):
        return value
    if not isinstance(value, str):
        return None
    try:
        return LeaveType(value.strip().upper())
    except ValueError:
        return None


def leave_category(leave_type: object) -> LeaveCategory:
    lt = parse_leave_type(leave_type)
    if lt in PAID_LEAVE_TYPES:
        return LeaveCategory.PAID
    if lt in MENSTRUAL_LEAVE_TYPES:
        return LeaveCategory.MENSTRUAL
    return LeaveCategory.UNPAID


def is_paid_leave_type(leave_type: object) -> bool:
    return leave_category(leave_type) is LeaveCategory.PAID


def is_menstrual_leave_type(leave_type: object) -> bool:
    return leave_category(leave_type) is LeaveCategory.MENSTRUAL


def get_option(leave_type: LeaveType) -> LeaveTypeOption:
    return _OPTIONS_BY_VALUE[leave_type]


def is_allowed_for_gender(leave_type: LeaveType, gender: Optional[str]) -> bool:
    option = get_option(leave_type)
    if not option.allowed_genders:
        return True
    if not gender:
        return False
    gender_value = getattr(gender, "value", gender)
    return gender_value in {g.value for g in option.allowed_genders}


def options_for_gender(gender: Optional[str]) -> List[LeaveTypeOption]:
    """Visible options an employee of the given gender may submit."""
    return [
        opt
        for opt in LEAVE_TYPE_OPTIONS
        if not opt.hidden and is_allowed_for_gender(opt.value, gender)
    ]
