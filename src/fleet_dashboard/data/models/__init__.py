from .common import FleetBaseModel
from .hosts import HostSummary, HostSummaryPlatform, LabelSummary
from .macadmins import MacadminAggregate, MacadminsResponse, MunkiIssue, MunkiVersion
from .mdm import MdmEnrollmentBucket, MdmEnrollmentStatus, MdmSolution, MdmSummary
from .software import Software, SoftwareResponse, Vulnerability
from .teams import EnrollSecret, EnrollSecretsResponse, Features, Team, TeamsResponse

__all__ = [
    "FleetBaseModel",
    "HostSummary",
    "HostSummaryPlatform",
    "LabelSummary",
    "MacadminAggregate",
    "MacadminsResponse",
    "MunkiIssue",
    "MunkiVersion",
    "MdmEnrollmentBucket",
    "MdmEnrollmentStatus",
    "MdmSolution",
    "MdmSummary",
    "Software",
    "SoftwareResponse",
    "Vulnerability",
    "EnrollSecret",
    "EnrollSecretsResponse",
    "Features",
    "Team",
    "TeamsResponse",
]
