"""Fixed selectors, labels, form keys and operator messages."""

import re

# Host page (MUI-rendered case view).
LEAD_HEADING_SELECTOR = "h1.MuiTypography-h1"
LEAD_PREFIX = "Lead #"
LEAD_NUMBER_RE = re.compile(r"Lead #([A-Z0-9]+)")

LABEL_SELECTOR = ".MuiTypography-body2"
CONTAINER_CLASS = "MuiBox-root"
VALUE_SELECTOR = ".MuiTypography-body1"

ASSIGNED_LABEL_SELECTOR = ".MuiTypography-subtitle1"
ASSIGNED_LABEL_TEXT = "Assigned to"
ASSIGNED_VALUE_SELECTOR = ".MuiTypography-h3"

TIMELINE_ITEM_SELECTOR = ".MuiTimelineItem-root"
TIMELINE_NEW_LEAD_MARKER = "New lead:"
TIMELINE_DATE_SELECTOR = ".MuiTypography-caption"

CHANGE_STATUS_ICON_SELECTOR = 'button .MuiButton-label svg path[d*="M17 3H5c-1.11"]'
ASSIGN_TO_ME_ICON_SELECTOR = 'button .MuiButton-label svg path[d*="M19 3h-4.18"]'

LABEL_FIRST_NAME = ("First name",)
LABEL_LAST_NAME = ("Last name",)
LABEL_EMAIL = ("Email address",)
LABEL_PRIMARY_PHONE = ("Primary phone number",)
LABEL_PREFERRED_PHONE = (
    "Numéro du contact principal",
    "Preferred contact number (if different from above)",
)
LABEL_VERBATIM = (
    "Pouvez-vous décrire le problème",
    "Can you share your unresolved concern",
)
LABEL_CONFIRMATION_EMAIL = ("Confirmation Email",)

MONTHS = {
    "Jan": 1,
    "Feb": 2,
    "Mar": 3,
    "Apr": 4,
    "May": 5,
    "Jun": 6,
    "Jul": 7,
    "Aug": 8,
    "Sep": 9,
    "Oct": 10,
    "Nov": 11,
    "Dec": 12,
}

PHONE_DIGITS = 10

# Third-party status dialog.
STATUS_DIALOG_SELECTOR = '.MuiDialog-paper[role="dialog"]'
STATUS_FIELD_SELECTOR = 'input[name="status"]'
STATUS_FIELD_VALUE = "COMPLETED"
UPDATED_SYSTEM_FIELD_SELECTOR = 'input[name="updatedSystem"]'
UPDATED_SYSTEM_FIELD_VALUE = "None"
EXTERNAL_ORDER_FIELD_SELECTOR = 'input[name="externalSystemOrderID"]'

# External form endpoint and entry keys.
FORM_BASE_URL = (
    "https://docs.google.com/forms/d/e/"
    "1FAIpQLSfJ0AQaptO3wIaa09kJhHGULvApaiAdQRnTJzCq7CzwmP3SKw/viewform"
)
ENTRY_RECEIVED_DATE = "entry.1882987299"
ENTRY_LINE_OF_BUSINESS = "entry.506082014"
ENTRY_BRAND = "entry.104012616"
ENTRY_CUSTOMER_TYPE = "entry.1228494129"
ENTRY_PRODUCT = "entry.1098890156"
ENTRY_LANGUAGE = "entry.500460836"
ENTRY_BAN_CID = "entry.615216667"
ENTRY_FULL_NAME = "entry.1133516513"
ENTRY_PRIMARY_PHONE = "entry.504696174"
ENTRY_PREFERRED_PHONE = "entry.1161771354"
ENTRY_VERBATIM = "entry.961402602"

BAN_CID_MAX_LENGTH = 9

BRAND_OPTIONS = (
    "TELUS",
    "Koodo",
    "Public Mobile",
    "Subscription",
    "SHS Residential",
    "Custom Home",
    "Mascon By TELUS",
    "PC Mobile",
    "Commercial Security",
    "SMB Security",
)
PRODUCT_OPTIONS = (
    "Postpaid",
    "Prepaid",
    "EPP",
    "Pure Fibre in CSR",
    "Copper in Compass",
    "Copper in CSR",
    "Offnet",
    "SmartHub",
    "Apple TV",
    "Discovery+",
    "Corp",
    "MMB",
    "SmartEnergy",
    "Telus Online Security (TOS)",
    "Xbox Game Pass Ultimate (XGPU)",
)
LINE_OF_BUSINESS_OPTIONS = ("Wireless", "Wireline")
CUSTOMER_TYPE_OPTIONS = ("Consumer", "EPP", "Business")
LANGUAGE_OPTIONS = ("EN", "FR")

# Operator-facing messages.
WAITING_MESSAGE = "Waiting up to 60 seconds for the user to open a new lead..."
DETECTION_TIMEOUT_MESSAGE = (
    "Auto-detect new lead has timed out. Data will refresh when you open a new lead."
)
NEXT_LEAD_TIMEOUT_MESSAGE = (
    "Auto-detect new lead has timed out. "
    "Data will refresh when you open a new lead."
)
CHANGE_STATUS_MISSING_MESSAGE = 'Could not find "Change Status" button. Please click it manually.'
DIALOG_TIMEOUT_MESSAGE = (
    "The Change Status dialog did not open in time. Please complete the status change manually."
)
ASSIGN_TO_ME_MESSAGE = 'Please click "ASSIGN TO ME" first before submitting the form.'
