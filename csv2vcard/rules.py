"""
Fixed conversion rules.

Everything here is a constant on purpose: the output format and the
telephone convention are not configurable per call.
"""

VCARD_VERSION = "4.0"
TELEPHONE_TYPE = "cell"
LINE_TERMINATOR = "\n"

# Positional layout of a raw row
ROW_FIELDS = ("first_name", "last_name", "email_address", "telephone_number")

# Telephone regrouping: +CC ZZZ SS SS SS ...
COUNTRY_CODE_LENGTH = 2
ZONE_NUMBER_LENGTH = 3
SUBSCRIBER_GROUP_LENGTH = 2

REV_TIMESTAMP_FORMAT = "%Y%m%dT%H%M%SZ"

DEFAULT_CSV_DELIMITER = ";"
SNIFFABLE_DELIMITERS = [",", ";", "\t", "|"]
SNIFF_SAMPLE_SIZE = 4096

CSV_EXTENSIONS = (".csv",)
XLSX_EXTENSIONS = (".xlsx",)
XLS_EXTENSIONS = (".xls",)
SUPPORTED_EXTENSIONS = CSV_EXTENSIONS + XLSX_EXTENSIONS + XLS_EXTENSIONS
OUTPUT_EXTENSION = ".vcf"
VCARD_MEDIA_TYPE = "text/vcard"
