"""Core constants used across Trackline modules.

This module centralizes entity names, field names, and business literals.
Keeping values here avoids magic literals in overlay and fan-out logic.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_DATA_ROOT = Path(".trackline")
ENTITIES_DIR_NAME = "entities"
TRACKING_DIR_NAME = "tracking"
TRACKING_RECORDS_FILE_NAME = "records.jsonl"
LANCE_DIR_NAME = "records.lance"
ENTITY_FILE_SUFFIX = ".jsonl"
DEFAULT_EVENT_BUS_NAME = "default"
DEFAULT_EVENT_SOURCE = "trackline.enrollments"
ENROLLMENT_EVENT_DETAIL_TYPE = "EnrollmentTrackingRequested"
PUBLISH_CHUNK_SIZE = 10
SUPPORTED_MAPPING_VERSION = 1

# Source entity types.
ENROLLMENT = "enrollment"
ACCOUNT = "account"
CASE = "case"
MEMBER_PLAN = "member-plan"
COVERAGE_BENEFIT = "coverage-benefit"
PREAUTHORIZATION = "preauthorization"
COPAY_ASSISTANCE = "copay-assistance"
CHARITABLE_PROGRAM = "charitable-program"
REFERRAL = "referral"
MEDICATION_DOSAGE = "medication-dosage"
ORDER = "order"
AUTHORIZATION_CONSENT = "authorization-consent"
TRACKING_RECORD = "tracking-record"

# Query parameters bound from an enrollment event.
ENROLLMENT_ID_PARAMETER = "enrollment_id"
PATIENT_ID_PARAMETER = "patient_id"
SUPPORTED_QUERY_PARAMETERS = (ENROLLMENT_ID_PARAMETER, PATIENT_ID_PARAMETER)

# Source record fields.
ID_FIELD = "Id"
CREATED_DATE_FIELD = "CreatedDate"
SYSTEM_FIELDS = ("Id", "CreatedDate", "LastModifiedDate")
FIELD_PATH_SEPARATOR = "."
DATE_FIELD_MARKER = "date"
NULL_MARKER = "null"
STATUS_FIELD = "Status"
EXPIRATION_DATE_FIELD = "ExpirationDate"
ROLE_FIELD = "Role"
PROGRAM_TYPE_FIELD = "ProgramType"
DIAGNOSIS_FIELD = "Diagnosis"
PLAN_STATUS_PATH = "MemberPlan.Status"
PLAN_ROLE_PATH = "MemberPlan.Role"
PRIOR_AUTH_REQUIRED_FIELD = "PriorAuthRequired"
BENEFIT_TYPE_FIELD = "BenefitType"
COPAY_AMOUNT_FIELD = "CopayAmount"
OUT_OF_POCKET_MAX_FIELD = "OutOfPocketMax"
COVERAGE_BENEFIT_LINK_FIELD = "CoverageBenefitId"

# Business literals.
ACTIVE_STATUS = "Active"
PRIMARY_ROLE = "Primary"
SECONDARY_ROLE = "Secondary"
TPAP_PROGRAM_TYPE = "TPAP"
YES_VALUE = "Yes"
FLAG_YES = "Y"
FLAG_NO = "N"
DEFAULT_REFERRAL_SOURCE = "HUB"
DEFAULT_PATIENT_STATE = "NA"
FOP_FULL_NAME = "Fibrodysplasia Ossificans Progressiva (FOP)"
FOP_SHORT_CODE = "FOP"
COVERAGE_BENEFIT_LIMIT = 3
PREAUTHORIZATION_LIMIT = 1
CHARITABLE_PROGRAM_LIMIT = 1

# Tracking record fields written by overlays and finalization.
PHI_CONSENT = "PHI_Consent"
PROGRAM_CONSENT = "Program_Consent"
CONSENT_DATE = "Consent_Date"
CONSENT_EXPIRATION = "Consent_Expiration"
INDICATION = "Indication"
REFERRAL_SOURCE = "Referral_Source"
PATIENT_STATE = "Patient_State"
PRIMARY_PA_REQUIRED = "Primary_PA_Required"
PRIMARY_BENEFIT_TYPE = "Primary_Benefit_Type"
PRIMARY_COPAY_AMOUNT = "Primary_Copay_Amount"
PRIMARY_OOP_MAX = "Primary_OOP_Max"
SECONDARY_BENEFIT_TYPE = "Secondary_Benefit_Type"
SECONDARY_COPAY_AMOUNT = "Secondary_Copay_Amount"
PA_STATUS = "PA_Status"
PA_EXPIRATION = "PA_Expiration"
TPAP_EXPIRATION = "TPAP_Expiration"
FULFILLMENT_RECEIVED = "Fulfillment_Received"

TRACKING_DEFAULTS = {
    PHI_CONSENT: FLAG_NO,
    PROGRAM_CONSENT: FLAG_NO,
    REFERRAL_SOURCE: DEFAULT_REFERRAL_SOURCE,
    PRIMARY_PA_REQUIRED: FLAG_NO,
}
OVERLAY_FIELDS = (
    PHI_CONSENT,
    PROGRAM_CONSENT,
    CONSENT_DATE,
    CONSENT_EXPIRATION,
    INDICATION,
    REFERRAL_SOURCE,
    PATIENT_STATE,
    PRIMARY_PA_REQUIRED,
    PRIMARY_BENEFIT_TYPE,
    PRIMARY_COPAY_AMOUNT,
    PRIMARY_OOP_MAX,
    SECONDARY_BENEFIT_TYPE,
    SECONDARY_COPAY_AMOUNT,
    PA_STATUS,
    PA_EXPIRATION,
    TPAP_EXPIRATION,
    FULFILLMENT_RECEIVED,
)
FINALIZATION_DEFAULTS = {
    PATIENT_STATE: DEFAULT_PATIENT_STATE,
    REFERRAL_SOURCE: DEFAULT_REFERRAL_SOURCE,
}

# Fan-out key fields used when the mapping file omits them.
DEFAULT_PRODUCT_CODE_FIELD = "ProductCode"
DEFAULT_REFERRAL_KEY_FIELD = "NDCCode"
DEFAULT_ORDER_KEY_FIELD = "DosageId"
DEFAULT_IDENTITY_TARGET_FIELD = "Dosage_Id"

# Consent sub-type scanned by the consent overlay.
CONSENT_TYPE_FIELD = "Type"
PATIENT_AUTHORIZATION_TYPE = "Patient Authorization"
