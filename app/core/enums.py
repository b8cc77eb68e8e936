from enum import Enum


class FineType(str, Enum):
    NONE = "none"
    FIXED = "fixed"
    PERCENTAGE = "percentage"


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    HALF_DAY = "half_day"
    HOLIDAY = "holiday"


class SubmissionStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class EvaluationStatus(str, Enum):
    """Statuses a teacher may set when evaluating a submission."""

    ACCEPTED = "accepted"
    REJECTED = "rejected"


class BookIssueStatus(str, Enum):
    ISSUED = "issued"
    RETURNED = "returned"


class BookIssueFilter(str, Enum):
    ISSUED = "issued"
    RETURNED = "returned"
    OVERDUE = "overdue"


class MemberType(str, Enum):
    STUDENT = "student"
    STAFF = "staff"


class SubjectType(str, Enum):
    THEORY = "theory"
    PRACTICAL = "practical"


class CallType(str, Enum):
    INCOMING = "incoming"
    OUTGOING = "outgoing"


class PostalType(str, Enum):
    DISPATCH = "dispatch"
    RECEIVE = "receive"


class PaymentMode(str, Enum):
    CASH = "Cash"
    CHEQUE = "Cheque"
    DD = "DD"
    BANK_TRANSFER = "Bank Transfer"
    UPI = "UPI"
    CARD = "Card"
